from .manager import AttachmentStore

__all__ = ["AttachmentStore"]
