import logging
from typing import Any


class LoggingObserver:
    """Forwards transform diagnostics to the stdlib logging module."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("tokensync")

    @staticmethod
    def _format(message: str, context: dict[str, Any]) -> str:
        if not context:
            return message
        details = " ".join(f"{k}={v}" for k, v in sorted(context.items()))
        return f"{message} ({details})"

    def warn(self, code: str, message: str, **context: Any) -> None:
        self._logger.warning("[%s] %s", code, self._format(message, context))

    def info(self, message: str, **context: Any) -> None:
        self._logger.info(self._format(message, context))
