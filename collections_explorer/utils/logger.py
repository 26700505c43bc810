"""Logging setup and terminal-safe text handling.

Structured logging goes through structlog, rendered by the stdlib logging
machinery to stderr. Terminal text is sanitized on consoles that cannot
encode Unicode (legacy Windows code pages), since report summaries may echo
arbitrary source text.
"""
import locale
import logging
import sys

import structlog


# Unicode to ASCII replacements for non-UTF-8 terminals
ICON_MAP = {
    '✓': '[OK]',
    '✔': '[OK]',
    '✗': '[FAIL]',
    '⚠': '[WARN]',
    '→': '->',
    '←': '<-',
    '⇒': '=>',
    '…': '...',
    '•': '*',
    '│': '|',
    '─': '-',
}

_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def detect_terminal_encoding() -> str:
    """Detect the terminal's encoding.

    Returns:
        str: Lower-cased encoding name ('utf-8', 'cp1252', 'ascii', ...)
    """
    if hasattr(sys.stdout, 'encoding') and sys.stdout.encoding:
        return sys.stdout.encoding.lower()

    try:
        return locale.getpreferredencoding().lower()
    except (LookupError, ValueError):
        return 'ascii'


def is_utf8_capable() -> bool:
    """Check if the terminal can handle UTF-8 output."""
    return detect_terminal_encoding().replace('_', '-') in ('utf-8', 'utf8')


def sanitize_for_terminal(text: str) -> str:
    """Replace Unicode glyphs with ASCII equivalents when the terminal needs it.

    Characters without a mapping are replaced by '?' so printing never raises
    UnicodeEncodeError.

    Args:
        text: Text potentially containing non-ASCII characters

    Returns:
        str: Text safe for the current terminal
    """
    if is_utf8_capable():
        return text

    for unicode_char, ascii_replacement in ICON_MAP.items():
        text = text.replace(unicode_char, ascii_replacement)

    encoding = detect_terminal_encoding()
    try:
        return text.encode(encoding, errors='replace').decode(encoding)
    except LookupError:
        return text.encode('ascii', errors='replace').decode('ascii')


def resolve_level(level: str) -> int:
    """Map a level name to a logging level, defaulting to INFO."""
    return _LEVEL_MAP.get((level or "INFO").upper(), logging.INFO)


def configure_logging(level: str = "INFO") -> None:
    """Configure structlog to render through stdlib logging on stderr.

    Safe to call more than once; the root handlers are replaced each time.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR)
    """
    numeric_level = resolve_level(level)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", key="timestamp"),
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.dev.ConsoleRenderer(
            colors=sys.stderr.isatty() and is_utf8_capable(),
            pad_event_to=0,
            pad_level=False,
        ),
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(numeric_level)
    root_logger.addHandler(handler)
