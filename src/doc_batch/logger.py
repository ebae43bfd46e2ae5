import logging
import sys


class Log:
    """Service-wide logger for batches, downloads and retention sweeps.

    Keyword arguments are rendered as ``key=value`` context after the message,
    so batch sizes, file names and download ids show up in the plain stdout
    format without a structured handler.
    """

    _logger: logging.Logger = logging.getLogger("doc_batch")

    @classmethod
    def configure(cls, log_level: str) -> None:
        """Set the level from LOG_LEVEL and attach a stdout handler once."""
        cls._logger.setLevel(log_level.upper())
        if not cls._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(
                logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
            )
            cls._logger.addHandler(handler)

    @staticmethod
    def _render(message: str, context: dict[str, object]) -> str:
        if not context:
            return message
        pairs = " ".join(f"{key}={value}" for key, value in context.items())
        return f"{message} [{pairs}]"

    @classmethod
    def info(cls, message: str, **context: object) -> None:
        cls._logger.info(cls._render(message, context))

    @classmethod
    def warning(cls, message: str, **context: object) -> None:
        cls._logger.warning(cls._render(message, context))

    @classmethod
    def error(cls, message: str, exc_info: bool = False, **context: object) -> None:
        """Log at error level; ``exc_info=True`` attaches the active traceback."""
        cls._logger.error(cls._render(message, context), exc_info=exc_info)

    @classmethod
    def debug(cls, message: str, **context: object) -> None:
        cls._logger.debug(cls._render(message, context))
