from contextvars import ContextVar
from datetime import datetime, timezone
from enum import StrEnum
import logging
import sys
from typing import TYPE_CHECKING

from loguru import logger as loguru_logger


if TYPE_CHECKING:
    from loguru import Logger as LoguruLogger

from src.platform.config.core_setting import settings
from src.platform.logging.service_context import get_service_context


# Argument names whose values never reach a log line
SENSITIVE_KEYWORDS = {
    'password',
    'token',
    'payment_proof_token',
    'card_number',
    'secret',
}
MASK = '********'
MAX_LOGGED_CONTENT_LENGTH = 2000

chain_start_time_var: ContextVar[float] = ContextVar('chain_start_time_var', default=0)
call_depth_var: ContextVar[int] = ContextVar('call_depth_var', default=0)


class ExtraField(StrEnum):
    SERVICE_CONTEXT = 'service_context'
    CHAIN_START_TIME = 'chain_start_time'
    CALL_TARGET = 'call_target'


def _empty_extra() -> dict[str, str]:
    return {
        ExtraField.SERVICE_CONTEXT: get_service_context(),
        ExtraField.CHAIN_START_TIME: '',
        ExtraField.CALL_TARGET: '',
    }


def _level_for_access_line(message: str) -> str | None:
    """
    Level for an access log line, picked by its response status.

    '127.0.0.1:51234 - "POST /api/ticket HTTP/1.1" 409' -> WARNING
    """
    if ' HTTP/' not in message:
        return None
    _, _, tail = message.rpartition('"')
    status_text = tail.strip().split(' ', 1)[0]
    if not status_text.isdigit():
        return None

    status_code = int(status_text)
    if status_code >= 500:
        return 'ERROR'
    if status_code >= 400:
        return 'WARNING'
    return 'INFO'


class InterceptHandler(logging.Handler):
    """Route stdlib logging (granian, sqlalchemy, asyncio) into the loguru sinks."""

    def __init__(self) -> None:
        super().__init__()
        self._logger = loguru_logger.bind(**_empty_extra())

    def emit(self, record: logging.LogRecord) -> None:
        message = record.getMessage()

        level: str | int | None = _level_for_access_line(message)
        if level is None:
            try:
                level = loguru_logger.level(record.levelname).name
            except ValueError:
                level = record.levelno

        # Walk past the logging module frames to the real caller
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore
            depth += 1

        self._logger.opt(depth=depth, exception=record.exc_info).log(level, message)


io_log_format = ' | '.join(
    (
        f'<c>{{extra[{ExtraField.SERVICE_CONTEXT}]}}</>',
        '<lvl>{level:<8}</>',
        f'<c>{{file}}::{{function}}:{{line}}</>=><y>{{extra[{ExtraField.CALL_TARGET}]}}</>',
        '{message}',
        '<lk>{elapsed}</>',
        f'<lk>{{extra[{ExtraField.CHAIN_START_TIME}]:<18}}</>',
    )
)


def _configure_sinks() -> 'LoguruLogger':
    loguru_logger.remove()
    bound = loguru_logger.bind(**_empty_extra())
    min_level = 'DEBUG' if settings.DEBUG else 'INFO'

    bound.add(sys.stdout, format=io_log_format, level=min_level, enqueue=True)

    if settings.DEBUG:
        settings.LOG_DIR.mkdir(parents=True, exist_ok=True)
        hour = datetime.now(timezone.utc).strftime('%Y-%m-%d_%H')
        bound.add(
            settings.LOG_DIR / f'{settings.LOG_FILE_PREFIX}{hour}.log',
            format=io_log_format,
            rotation='1 hour',
            retention=settings.LOG_FILE_RETENTION,
            compression='gz',
            enqueue=True,
            level=min_level,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    return bound


custom_logger = _configure_sinks()
