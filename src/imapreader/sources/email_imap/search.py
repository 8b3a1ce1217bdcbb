from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum


class SearchKey(str, Enum):
    ALL = "ALL"
    FLAGGED = "FLAGGED"
    UNFLAGGED = "UNFLAGGED"
    ANSWERED = "ANSWERED"
    UNANSWERED = "UNANSWERED"
    DELETED = "DELETED"
    SEEN = "SEEN"
    UNSEEN = "UNSEEN"
    RECENT = "RECENT"
    NEW = "NEW"
    OLD = "OLD"
    FROM = "FROM"
    TO = "TO"
    CC = "CC"
    BCC = "BCC"
    SUBJECT = "SUBJECT"
    BODY = "BODY"
    TEXT = "TEXT"
    KEYWORD = "KEYWORD"
    UNKEYWORD = "UNKEYWORD"
    BEFORE = "BEFORE"
    SINCE = "SINCE"
    ON = "ON"


VALUE_KEYS = {
    SearchKey.FROM,
    SearchKey.TO,
    SearchKey.CC,
    SearchKey.BCC,
    SearchKey.SUBJECT,
    SearchKey.BODY,
    SearchKey.TEXT,
    SearchKey.KEYWORD,
    SearchKey.UNKEYWORD,
}
DATE_KEYS = {SearchKey.BEFORE, SearchKey.SINCE, SearchKey.ON}
# an empty BODY/SUBJECT filter means "no filter" rather than "match empty string"
OPTIONAL_VALUE_KEYS = {SearchKey.BODY, SearchKey.SUBJECT}


@dataclass(frozen=True, slots=True)
class SearchTerm:
    key: SearchKey
    value: str | date | None = None

    def __post_init__(self) -> None:
        if self.key in DATE_KEYS:
            if not isinstance(self.value, date):
                raise ValueError(f"Критерий {self.key.value} требует дату, получено: {self.value!r}")
        elif self.key in VALUE_KEYS:
            if self.value is not None and not isinstance(self.value, str):
                raise ValueError(f"Критерий {self.key.value} требует строку, получено: {self.value!r}")
            if not self.value and self.key not in OPTIONAL_VALUE_KEYS:
                raise ValueError(f"Критерий {self.key.value} требует значение")
        elif self.value is not None:
            raise ValueError(f"Критерий {self.key.value} не принимает значение")

    @property
    def is_empty(self) -> bool:
        return self.key in OPTIONAL_VALUE_KEYS and not self.value

    def to_criteria(self) -> list[str | date]:
        if self.is_empty:
            return []
        if self.key in DATE_KEYS:
            value = self.value.date() if isinstance(self.value, datetime) else self.value
            return [self.key.value, value]
        if self.value is None:
            return [self.key.value]
        return [self.key.value, self.value]


def build_criteria(terms: list[SearchTerm]) -> list[str | date]:
    criteria: list[str | date] = []
    for term in terms:
        criteria.extend(term.to_criteria())
    return criteria or [SearchKey.ALL.value]


class SortOrder(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


@dataclass(slots=True)
class SearchQuery:
    terms: list[SearchTerm] = field(default_factory=list)
    limit: int = 0
    page: int = 1
    order: SortOrder = SortOrder.DESC

    @property
    def offset(self) -> int:
        if not self.limit or self.page <= 1:
            return 0
        return (self.page - 1) * self.limit

    def paginate(self, uids: list[int]) -> list[int]:
        ordered = sorted(uids, reverse=self.order == SortOrder.DESC)
        if not self.limit:
            return ordered
        return ordered[self.offset : self.offset + self.limit]
