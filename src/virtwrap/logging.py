import json
import logging
import sys
from typing import Any, Dict
from datetime import datetime, timezone


class StructuredLogger:
    """
    A logger that prints leveled messages with severity markers, or JSON lines.
    """

    def __init__(self, name: str, level: int = logging.INFO):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)
        self.logger.propagate = True

        # Clear existing handlers to avoid duplicate logs
        if self.logger.handlers:
            self.logger.handlers.clear()

        handler = self.StdStreamHandler()
        handler.setFormatter(self.ConsoleFormatter())
        self.logger.addHandler(handler)

    class StdStreamHandler(logging.Handler):
        """Writes INFO and below to stdout, WARNING and above to stderr.

        Streams are looked up on every record so redirected ``sys.stdout`` and
        ``sys.stderr`` are honoured.
        """

        def emit(self, record: logging.LogRecord) -> None:
            try:
                stream = sys.stderr if record.levelno >= logging.WARNING else sys.stdout
                stream.write(self.format(record) + "\n")
                stream.flush()
            except Exception:
                self.handleError(record)

    class ConsoleFormatter(logging.Formatter):
        MARKERS = {
            logging.DEBUG: "·",
            logging.INFO: "==>",
            logging.WARNING: "⚠",
            logging.ERROR: "✗",
            logging.CRITICAL: "✗",
        }

        def format(self, record: logging.LogRecord) -> str:
            marker = self.MARKERS.get(record.levelno, "==>")
            line = f"{marker} {record.getMessage()}"
            if record.exc_info:
                line += "\n" + self.formatException(record.exc_info)
            return line

    class JsonFormatter(logging.Formatter):
        # Standard LogRecord attributes that should not be included as extra fields
        STANDARD_ATTRS = {
            "name",
            "msg",
            "args",
            "created",
            "filename",
            "funcName",
            "levelname",
            "levelno",
            "lineno",
            "module",
            "msecs",
            "message",
            "pathname",
            "process",
            "processName",
            "relativeCreated",
            "thread",
            "threadName",
            "exc_info",
            "exc_text",
            "stack_info",
            "taskName",
        }

        def format(self, record: logging.LogRecord) -> str:
            log_entry: Dict[str, Any] = {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "level": record.levelname,
                "logger": record.name,
                "message": record.getMessage(),
            }

            if record.exc_info:
                log_entry["exception"] = self.formatException(record.exc_info)

            for key, value in record.__dict__.items():
                if key not in self.STANDARD_ATTRS:
                    log_entry[key] = value

            return json.dumps(log_entry, default=str)

    def configure(self, level: str = "INFO", fmt: str = "text") -> None:
        """Apply level and output format, typically from AppConfig."""
        self.logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        formatter: logging.Formatter = (
            self.JsonFormatter() if fmt == "json" else self.ConsoleFormatter()
        )
        for handler in self.logger.handlers:
            handler.setFormatter(formatter)

    def info(self, message: str, **kwargs: Any) -> None:
        self.logger.info(message, extra=kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        self.logger.error(message, exc_info=exc_info, extra=kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self.logger.warning(message, extra=kwargs)

    def debug(self, message: str, **kwargs: Any) -> None:
        self.logger.debug(message, extra=kwargs)

    def critical(self, message: str, exc_info: bool = True, **kwargs: Any) -> None:
        self.logger.critical(message, exc_info=exc_info, extra=kwargs)


# Global logger instance
logger = StructuredLogger("virtwrap")
