from .setup import CorrelationIdFilter, configure_logging, get_logger, resolve_level

__all__ = ["CorrelationIdFilter", "configure_logging", "get_logger", "resolve_level"]
