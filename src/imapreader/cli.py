from __future__ import annotations

import subprocess
import sys
import uuid
from contextlib import contextmanager
from datetime import date, timezone
from pathlib import Path
from typing import Iterator

import typer
from dateutil import parser as dt_parser
from rich import print
from rich.markup import escape

from imapreader.config import Settings
from imapreader.core.logging import configure_logging, get_logger
from imapreader.core.mime import unresolved_references
from imapreader.core.storage import AttachmentStore
from imapreader.services import MailboxReader, export_messages, run_doctor_checks
from imapreader.sources.email_imap import (
    ImapSession,
    ImapSessionError,
    SearchKey,
    SearchQuery,
    SearchTerm,
    SortOrder,
)
from imapreader.sources.models import Message

app = typer.Typer(no_args_is_help=True, help="imapreader: чтение почтового ящика по IMAP")


def _load_settings(base_dir: Path | None = None) -> Settings:
    settings = Settings.load(base_dir=base_dir)
    settings.ensure_directories()
    return settings


def _parse_date(value: str | None) -> date | None:
    if not value:
        return None
    parsed = dt_parser.parse(value)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date()


@contextmanager
def _open_reader(mailbox: str | None = None) -> Iterator[MailboxReader]:
    settings = _load_settings()
    try:
        account = settings.require_imap_account()
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    correlation_id = uuid.uuid4().hex
    configure_logging(settings.logs_dir, correlation_id=correlation_id, level=settings.log_level)
    logger = get_logger("imapreader.reader", correlation_id)

    store = AttachmentStore(settings.attachments_dir) if settings.save_attachments else None
    session = ImapSession(
        account,
        retry_attempts=settings.imap_retry_attempts,
        retry_delay_sec=settings.imap_retry_delay_sec,
        logger=logger,
    )
    try:
        with session:
            if mailbox and mailbox != session.mailbox:
                session.select(mailbox)
            yield MailboxReader(settings=settings, session=session, logger=logger, store=store)
    except ImapSessionError as exc:
        print(f"[red]IMAP ошибка[/red]: {exc}")
        raise typer.Exit(1) from exc


def _build_terms(
    *,
    unseen: bool,
    flagged: bool,
    sender: str | None,
    to: str | None,
    subject: str | None,
    body: str | None,
    text: str | None,
    since: str | None,
    before: str | None,
    on: str | None,
) -> list[SearchTerm]:
    terms: list[SearchTerm] = []
    if unseen:
        terms.append(SearchTerm(SearchKey.UNSEEN))
    if flagged:
        terms.append(SearchTerm(SearchKey.FLAGGED))
    if sender:
        terms.append(SearchTerm(SearchKey.FROM, sender))
    if to:
        terms.append(SearchTerm(SearchKey.TO, to))
    if subject:
        terms.append(SearchTerm(SearchKey.SUBJECT, subject))
    if body:
        terms.append(SearchTerm(SearchKey.BODY, body))
    if text:
        terms.append(SearchTerm(SearchKey.TEXT, text))
    for key, value in ((SearchKey.SINCE, since), (SearchKey.BEFORE, before), (SearchKey.ON, on)):
        parsed = _parse_date(value)
        if parsed:
            terms.append(SearchTerm(key, parsed))
    return terms


def _print_summary(message: Message) -> None:
    sender = message.from_email or "-"
    stamp = message.date.strftime("%Y-%m-%d %H:%M:%S") if message.date else "-"
    marker = "[bold]*[/bold]" if message.unseen else " "
    print(f"{marker} {message.uid:>7} {stamp} {escape(sender)}: {escape(message.subject)}")
    for attachment in message.attachments.values():
        print(f"          [cyan]{attachment.disposition.value}[/cyan] {escape(attachment.name)} -> {attachment.file_path or '-'}")


@app.command("check")
def check_command() -> None:
    settings = _load_settings()
    account = settings.imap_account
    if account is None:
        print("[yellow]IMAP аккаунт не настроен[/yellow]")
        raise typer.Exit(1)
    try:
        with ImapSession(account, retry_attempts=settings.imap_retry_attempts):
            pass
    except ImapSessionError as exc:
        print(f"[red]IMAP ошибка[/red] ({account.username}@{account.host}:{account.port}): {exc}")
        raise typer.Exit(1) from exc
    print(f"[green]IMAP OK[/green]: {account.username}@{account.host}:{account.port}/{account.mailbox}")


@app.command("fetch")
def fetch_command(
    mailbox: str | None = typer.Option(None, help="Папка (по умолчанию из IMAP_MAILBOX)"),
    unseen: bool = typer.Option(False, "--unseen", help="Только непрочитанные"),
    flagged: bool = typer.Option(False, "--flagged", help="Только помеченные"),
    sender: str | None = typer.Option(None, "--from", help="Отправитель"),
    to: str | None = typer.Option(None, help="Получатель"),
    subject: str | None = typer.Option(None, help="Текст в теме"),
    body: str | None = typer.Option(None, help="Текст в теле письма"),
    text: str | None = typer.Option(None, help="Текст в заголовках или теле"),
    since: str | None = typer.Option(None, help="Письма начиная с даты"),
    before: str | None = typer.Option(None, help="Письма до даты"),
    on: str | None = typer.Option(None, help="Письма за дату"),
    limit: int | None = typer.Option(None, help="Писем на страницу (по умолчанию из IMAPREADER_MAX_MESSAGES)"),
    page: int = typer.Option(1, min=1, help="Номер страницы"),
    order: str = typer.Option("desc", help="asc|desc"),
    mark_read: bool | None = typer.Option(None, "--mark-read/--peek", help="Помечать письма прочитанными"),
) -> None:
    if order.lower() not in {"asc", "desc"}:
        raise typer.BadParameter("Параметр --order должен быть asc или desc")

    terms = _build_terms(
        unseen=unseen,
        flagged=flagged,
        sender=sender,
        to=to,
        subject=subject,
        body=body,
        text=text,
        since=since,
        before=before,
        on=on,
    )
    with _open_reader(mailbox) as reader:
        query = SearchQuery(
            terms=terms,
            limit=limit if limit is not None else reader.settings.max_messages,
            page=page,
            order=SortOrder(order.upper()),
        )
        messages = reader.get(query, mark_as_read=mark_read)

    print(f"[green]Получено писем[/green]: {len(messages)}")
    for message in messages:
        _print_summary(message)


@app.command("show")
def show_command(
    uid: int = typer.Argument(..., help="UID письма"),
    mailbox: str | None = typer.Option(None, help="Папка"),
    html: bool = typer.Option(False, "--html", help="Показать HTML вместо текста"),
    mark_read: bool | None = typer.Option(None, "--mark-read/--peek", help="Помечать письмо прочитанным"),
) -> None:
    with _open_reader(mailbox) as reader:
        message = reader.get_email(uid, mark_as_read=mark_read)

    _print_summary(message)
    for recipient in message.to:
        print(escape(f"To: {recipient.name or ''} <{recipient.email}>"))
    for recipient in message.cc:
        print(escape(f"Cc: {recipient.name or ''} <{recipient.email}>"))
    for name, value in message.custom_headers.items():
        print(escape(f"{name}: {value}"))
    print()
    print(escape(message.html if html else message.plain_text))

    missing = unresolved_references(message.html_text, message.attachments.values())
    if missing:
        print(f"[yellow]Не найдены inline-вложения[/yellow]: {', '.join(missing)}")


@app.command("eml")
def eml_command(
    uid: int = typer.Argument(..., help="UID письма"),
    out: Path | None = typer.Option(None, help="Файл .eml (по умолчанию в IMAPREADER_RAW_DIR)"),
    mailbox: str | None = typer.Option(None, help="Папка"),
) -> None:
    with _open_reader(mailbox) as reader:
        raw = reader.session.fetch_raw_message(uid)
        target = (out or reader.settings.raw_dir / f"{uid}.eml").resolve()

    message = Message(uid=uid, raw_body=raw)
    message.save_raw(target)
    print(f"[green]Сохранено[/green]: {target} ({len(raw)} bytes)")


@app.command("mark-read")
def mark_read_command(
    uid: int = typer.Argument(..., help="UID письма"),
    mailbox: str | None = typer.Option(None, help="Папка"),
) -> None:
    with _open_reader(mailbox) as reader:
        reader.mark_as_read(uid)
    print(f"[green]Помечено прочитанным[/green]: {uid}")


@app.command("delete")
def delete_command(
    uid: int = typer.Argument(..., help="UID письма"),
    mailbox: str | None = typer.Option(None, help="Папка"),
) -> None:
    with _open_reader(mailbox) as reader:
        reader.delete_email(uid)
    print(f"[green]Помечено на удаление[/green]: {uid}")


@app.command("move")
def move_command(
    uid: int = typer.Argument(..., help="UID письма"),
    folder: str = typer.Argument(..., help="Папка назначения"),
    mailbox: str | None = typer.Option(None, help="Исходная папка"),
) -> None:
    with _open_reader(mailbox) as reader:
        moved = reader.move_email(uid, folder)
    if moved:
        print(f"[green]Перемещено[/green]: {uid} -> {folder}")
    else:
        print(f"[yellow]Письмо уже в папке[/yellow] {folder}")


@app.command("export")
def export_command(
    format: str = typer.Option("xlsx,csv", help="Список форматов через запятую: xlsx,csv"),
    out: Path | None = typer.Option(None, help="Папка экспорта"),
    mailbox: str | None = typer.Option(None, help="Папка"),
    unseen: bool = typer.Option(False, "--unseen", help="Только непрочитанные"),
    since: str | None = typer.Option(None, help="Письма начиная с даты"),
    limit: int | None = typer.Option(None, help="Макс. писем"),
) -> None:
    formats = [item.strip().lower() for item in format.split(",") if item.strip()]
    supported = {"xlsx", "csv"}
    unknown = [item for item in formats if item not in supported]
    if unknown:
        raise typer.BadParameter(f"Неподдерживаемые форматы: {unknown}")

    terms = _build_terms(
        unseen=unseen,
        flagged=False,
        sender=None,
        to=None,
        subject=None,
        body=None,
        text=None,
        since=since,
        before=None,
        on=None,
    )
    with _open_reader(mailbox) as reader:
        query = SearchQuery(terms=terms, limit=limit if limit is not None else reader.settings.max_messages)
        messages = reader.get(query, mark_as_read=False)
        out_dir = (out or reader.settings.exports_dir).resolve()

    files = export_messages(messages=messages, formats=formats, out_dir=out_dir)
    print("[green]Экспорт завершен[/green]")
    for file_path in files:
        print(f"- {file_path}")


@app.command("doctor")
def doctor_command() -> None:
    settings = _load_settings()
    checks = run_doctor_checks(settings)

    print("Результаты doctor:")
    for check in checks:
        status = check["status"].upper()
        print(f"- [{status}] {check['check']}: {check['detail']}")


@app.command("tests")
def tests_command() -> None:
    result = subprocess.run([sys.executable, "-m", "pytest", "-q"], check=False)
    if result.returncode != 0:
        raise typer.Exit(result.returncode)
    print("[green]Тесты прошли успешно[/green]")


if __name__ == "__main__":
    app()
