from __future__ import annotations

import hashlib
import json
import mimetypes
from datetime import datetime, timezone
from pathlib import Path


class AttachmentStore:
    def __init__(self, root: Path):
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def _sha256(data: bytes) -> str:
        digest = hashlib.sha256()
        digest.update(data)
        return digest.hexdigest()

    @staticmethod
    def _safe_name(value: str | None, fallback: str) -> str:
        cleaned = (value or "").strip()
        if not cleaned:
            return fallback
        cleaned = cleaned.replace("/", "_").replace("\\", "_").replace("\x00", "")
        if cleaned in {".", ".."}:
            return fallback
        return cleaned[:200]

    def _pick_filename(self, name: str | None, content: bytes, mime: str | None) -> str:
        fallback = self._sha256(content)[:20]
        if mime:
            fallback += mimetypes.guess_extension(mime) or ".bin"
        else:
            fallback += ".bin"
        return self._safe_name(name, fallback)

    def _append_meta(self, meta_entry: dict) -> None:
        meta_path = self.root / "meta.json"
        if meta_path.exists():
            current = json.loads(meta_path.read_text(encoding="utf-8"))
            if not isinstance(current, list):
                current = [current]
        else:
            current = []
        current.append(meta_entry)
        meta_path.write_text(json.dumps(current, ensure_ascii=False, indent=2), encoding="utf-8")

    def path_for(self, name: str | None, content: bytes = b"", mime: str | None = None) -> Path:
        return (self.root / self._pick_filename(name, content, mime)).resolve()

    def save(self, name: str, content: bytes, mime: str | None = None) -> str:
        local_path = self.path_for(name, content, mime)
        if local_path.exists():
            return str(local_path)

        local_path.write_bytes(content)
        self._append_meta(
            {
                "name": name,
                "saved_at": datetime.now(timezone.utc).isoformat(),
                "sha256": self._sha256(content),
                "mime": mime,
                "size_bytes": len(content),
                "local_path_abs": str(local_path),
            }
        )
        return str(local_path)
