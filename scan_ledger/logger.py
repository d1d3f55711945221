import logging

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_level = "INFO"


def configure_logging(level: str = "INFO") -> None:
    """
    Fija el nivel global. Se llama una sola vez desde create_app().
    """
    global _level
    _level = level.upper()
    if not logging.getLogger().handlers:
        logging.basicConfig(level=_level, format=LOG_FORMAT)
    logging.getLogger("scan_ledger").setLevel(_level)


def get_logger(name: str) -> logging.Logger:
    """
    Return a configured logger. Initializes basicConfig once.
    """
    if not logging.getLogger().handlers:
        logging.basicConfig(level=_level, format=LOG_FORMAT)
    return logging.getLogger(name)
