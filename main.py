"""Entry point for the SRRC events calendar service."""
import json
import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI

from api.app import create_app
from config import Settings
from fetcher.github_releases import GitHubReleaseFetcher
from processor.event_processor import EventProcessor
from scheduler.refresh_scheduler import RefreshScheduler
from storage.event_cache import EventCache

# Attributes every LogRecord carries; anything else came from extra=
_RESERVED_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord('', logging.INFO, '', 0, '', (), None))
) | {'message', 'asctime', 'taskName'}


# Configure JSON logging
class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON, including fields passed via extra."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        for key, value in vars(record).items():
            if key not in _RESERVED_RECORD_ATTRS and key not in log_data:
                log_data[key] = value

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def create_application(settings: Optional[Settings] = None) -> FastAPI:
    """
    Wire fetcher, cache, scheduler and API together.

    Args:
        settings: Service settings (default: read from the environment)

    Returns:
        FastAPI application owning the cache and its scheduler
    """
    if settings is None:
        settings = Settings.from_env()

    setup_logging(settings.log_level)
    logger = logging.getLogger(__name__)
    logger.info(
        "Creating events service",
        extra={
            'repository': settings.github_repository,
            'asset_name': settings.github_asset_name,
            'refresh_interval_seconds': settings.refresh_interval_seconds,
            'timeout_seconds': settings.timeout_seconds
        }
    )

    fetcher = GitHubReleaseFetcher(
        repository=settings.github_repository,
        asset_name=settings.github_asset_name,
        timeout=settings.timeout_seconds,
        api_base=settings.github_api_base
    )
    cache = EventCache(fetcher=fetcher, processor=EventProcessor())
    scheduler = RefreshScheduler(
        callback=cache.refresh,
        interval_seconds=settings.refresh_interval_seconds
    )

    return create_app(
        cache,
        scheduler=scheduler,
        cors_origins=settings.cors_allowed_origins
    )


def main() -> None:
    """Run the service with uvicorn."""
    settings = Settings.from_env()
    uvicorn.run(
        create_application(settings),
        host=settings.api_host,
        port=settings.api_port,
        log_config=None
    )


if __name__ == '__main__':
    main()
