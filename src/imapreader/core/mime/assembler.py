from __future__ import annotations

import logging

from imapreader.core.encoding import normalize, to_text
from imapreader.sources.models import Attachment, AttachmentKind, Message

from .classifier import Classification, PartKind, classify
from .decoder import decode_part
from .parts import PartNode
from .ports import AttachmentSink, PartSource

DEFAULT_MAX_DEPTH = 32


class MessageAssembler:
    """Rebuilds message bodies and attachments from a BODYSTRUCTURE tree.

    Parts are fetched one by one from ``session`` and visited depth-first in
    server order. Text is appended to the message, never replaced, because a
    single logical body can be split over several parts.
    """

    def __init__(
        self,
        session: PartSource,
        store: AttachmentSink | None = None,
        *,
        encoding: str = "UTF-8",
        peek: bool = True,
        max_depth: int = DEFAULT_MAX_DEPTH,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
    ):
        self.session = session
        self.store = store
        self.encoding = encoding
        self.peek = peek
        self.max_depth = max_depth
        self.logger = logger or logging.getLogger(__name__)

    def assemble(self, message: Message, root: PartNode) -> Message:
        if root.children:
            for index, child in enumerate(root.children):
                self._walk(message, child, str(index + 1), depth=1)
        else:
            self._walk(message, root, None, depth=0)
        return message

    def _walk(self, message: Message, part: PartNode, path: str | None, depth: int) -> None:
        raw = self.session.fetch_part_bytes(message.uid, path, peek=self.peek)
        data = decode_part(raw, part.encoding)
        classification = classify(part, message.uid, self.encoding)

        if classification.is_attachment:
            self._add_attachment(message, part, path, data, classification)
        elif classification.kind == PartKind.PLAIN:
            message.append_plain(self._text(part, data))
        elif classification.kind == PartKind.HTML:
            message.append_html(self._text(part, data))
        elif classification.kind == PartKind.NESTED_MESSAGE:
            message.append_plain(self._text(part, data))
        elif part.disposition and not part.children:
            self.logger.debug("Part %s of message %s dropped: no file name", path or "TEXT", message.uid)

        if not part.children:
            return
        if depth >= self.max_depth:
            self.logger.warning(
                "Message %s: part %s is nested deeper than %s levels, children skipped",
                message.uid,
                path,
                self.max_depth,
            )
            return

        for index, child in enumerate(part.children):
            if part.is_rfc822:
                child_path = path
            elif path is None:
                child_path = str(index + 1)
            else:
                child_path = f"{path}.{index + 1}"
            self._walk(message, child, child_path, depth + 1)

    def _text(self, part: PartNode, data: bytes) -> str:
        charset = part.charset()
        if charset:
            data = normalize(data, charset, self.encoding)
        return to_text(data, self.encoding)

    def _add_attachment(
        self,
        message: Message,
        part: PartNode,
        path: str | None,
        data: bytes,
        classification: Classification,
    ) -> None:
        attachment_id = classification.attachment_id or str(message.uid)
        attachment = Attachment(
            id=attachment_id,
            name=f"{attachment_id}-{classification.filename}",
            disposition=AttachmentKind.INLINE if classification.kind == PartKind.INLINE else AttachmentKind.ATTACHMENT,
            mime=part.mime_type,
            part_path=path,
        )
        if self.store is not None:
            attachment.file_path = self.store.save(attachment.name, data, attachment.mime)
        else:
            attachment.content = data

        key = message.add_attachment(attachment)
        self.logger.debug("Message %s: attachment %s stored under key %s", message.uid, attachment.name, key)
