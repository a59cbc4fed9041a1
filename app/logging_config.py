import logging

LOG_FORMAT = "%(levelname)s: %(name)s: %(message)s"

# SDK loggers are very chatty at DEBUG (full request/response dumps).
_SDK_LOGGERS = ("botocore", "aiobotocore", "urllib3")


def ensure_logging(level: int = logging.INFO) -> None:
    """Configure the root logger for both the API process and the provisioning CLI."""

    formatter = logging.Formatter(LOG_FORMAT)
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    else:
        root.setLevel(level)
        for handler in root.handlers:
            handler.setFormatter(formatter)

    for name in _SDK_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def parse_log_level(value: str) -> int:
    level = logging.getLevelName(value.strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {value!r}")
    return level
