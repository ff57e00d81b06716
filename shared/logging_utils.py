import logging
import os
from typing import Iterable, Optional, Sequence, Set

_REDACTED_PLACEHOLDER = "[REDACTED]"
_SENSITIVE_KEY_PARTS = ("TOKEN", "SECRET", "KEY", "PASS", "PWD")
DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _is_sensitive_env_var(name: str) -> bool:
    upper_name = name.upper()
    return any(part in upper_name for part in _SENSITIVE_KEY_PARTS)


def _collect_sensitive_values(extra_values: Optional[Iterable[Optional[str]]] = None) -> Sequence[str]:
    secrets: Set[str] = {value for key, value in os.environ.items() if value and _is_sensitive_env_var(key)}
    for value in extra_values or ():
        if isinstance(value, str) and value:
            secrets.add(value)
    # Longest first so that a secret containing another is masked whole.
    return tuple(sorted(secrets, key=len, reverse=True))


class RedactingFormatter(logging.Formatter):
    """Wrap another formatter and mask secret values in its output."""

    def __init__(
        self,
        base_formatter: Optional[logging.Formatter] = None,
        secrets: Optional[Sequence[str]] = None,
        placeholder: str = _REDACTED_PLACEHOLDER,
    ) -> None:
        super().__init__()
        self._base_formatter = base_formatter or logging.Formatter(DEFAULT_FORMAT)
        self._secrets: Sequence[str] = tuple(secrets or ())
        self._placeholder = placeholder
        self.converter = self._base_formatter.converter

    def update_secrets(self, secrets: Sequence[str]) -> None:
        self._secrets = tuple(secrets)

    def redact(self, text: str) -> str:
        for secret in self._secrets:
            text = text.replace(secret, self._placeholder)
        return text

    def format(self, record: logging.LogRecord) -> str:
        return self.redact(self._base_formatter.format(record))

    def formatException(self, ei):
        return self.redact(self._base_formatter.formatException(ei))

    def formatTime(self, record, datefmt=None):
        return self._base_formatter.formatTime(record, datefmt)


def _wrap_handler(handler: logging.Handler, secrets: Sequence[str]) -> None:
    formatter = handler.formatter
    if isinstance(formatter, RedactingFormatter):
        formatter.update_secrets(secrets)
    else:
        handler.setFormatter(RedactingFormatter(formatter, secrets))


def configure_logging(
    *,
    level: Optional[str] = None,
    extra_values: Optional[Iterable[Optional[str]]] = None,
) -> None:
    """Configure root logging from ``LOG_LEVEL`` and redact secrets on every handler."""

    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO").upper()

    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(level=level, format=DEFAULT_FORMAT)
    root_logger.setLevel(level)

    secrets = _collect_sensitive_values(extra_values)

    for handler in root_logger.handlers:
        _wrap_handler(handler, secrets)

    for logger_obj in logging.Logger.manager.loggerDict.values():
        if not isinstance(logger_obj, logging.Logger):
            continue
        for handler in logger_obj.handlers:
            _wrap_handler(handler, secrets)
