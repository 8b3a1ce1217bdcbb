from .search import SearchKey, SearchQuery, SearchTerm, SortOrder, build_criteria
from .session import ImapSession, ImapSessionError, MessageSummary
from .structure import part_from_bodystructure

__all__ = [
    "ImapSession",
    "ImapSessionError",
    "MessageSummary",
    "SearchKey",
    "SearchQuery",
    "SearchTerm",
    "SortOrder",
    "build_criteria",
    "part_from_bodystructure",
]
