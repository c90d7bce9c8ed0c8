import logging
import sys


class _FieldsFormatter(logging.Formatter):
    """Renders structured fields after the message as sorted key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        fields: dict[str, object] = getattr(record, "fields", {})
        if not fields:
            return message
        rendered = " ".join(f"{key}={fields[key]}" for key in sorted(fields))
        return f"{message} {rendered}"


class Log:
    """Centralized logging with structured format."""

    _logger: logging.Logger = logging.getLogger("receipt_scanner")

    @classmethod
    def configure(cls, log_level: str) -> None:
        """Configure the logger with the specified level and stdout handler."""
        cls._logger.setLevel(log_level.upper())
        if not cls._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(
                _FieldsFormatter("%(asctime)s [%(levelname)s] %(message)s")
            )
            cls._logger.addHandler(handler)

    @classmethod
    def info(cls, message: str, **fields: object) -> None:
        """Log an info event."""
        cls._logger.info(message, extra={"fields": fields})

    @classmethod
    def error(cls, message: str, **fields: object) -> None:
        """Log an error event."""
        cls._logger.error(message, extra={"fields": fields})

    @classmethod
    def warning(cls, message: str, **fields: object) -> None:
        """Log a warning event."""
        cls._logger.warning(message, extra={"fields": fields})

    @classmethod
    def debug(cls, message: str, **fields: object) -> None:
        """Log a debug event."""
        cls._logger.debug(message, extra={"fields": fields})
