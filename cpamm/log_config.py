"""structlog setup for scripts and embedding hosts."""

import logging

import structlog


def configure_logging(level: str = "INFO") -> None:
    """Install the console processor chain, filtering below level.

    Args:
        level: Standard logging level name (e.g. "DEBUG", "INFO")

    Raises:
        ValueError: If level is not a known logging level name
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
    )
