from .doctor import run_doctor_checks
from .exporter import export_messages
from .reader import MailboxReader

__all__ = ["MailboxReader", "export_messages", "run_doctor_checks"]
