from contextlib import asynccontextmanager
from typing import AsyncIterator, TYPE_CHECKING

from fastapi import FastAPI
from structlog.stdlib import BoundLogger

from infrastructure.logging.setup import configure_logging
from infrastructure.services import get_notification_service, get_settings

if TYPE_CHECKING:
    from infrastructure.configuration import Settings


def _get_logger(settings: "Settings") -> BoundLogger:
    return configure_logging(
        log_level=settings.LOG_LEVEL, is_production=settings.is_production
    )


def _list_configs(settings: "Settings", logger: BoundLogger) -> None:
    config_settings: dict[str, list[object]] = {"settings": []}

    for key, value in settings.model_dump().items():
        if isinstance(value, dict):
            config_settings[key] = list(value.keys())
        else:
            config_settings["settings"].append({key: value})

    logger.info("configuration_initialized", base_settings=config_settings["settings"])
    for key, value in config_settings.items():
        if key != "settings":
            logger.info("configuration_loaded", config_setting=key, keys=value)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    logger = _get_logger(settings)

    app.state.settings = settings
    app.state.logger = logger

    logger.info("application_startup")
    _list_configs(settings, logger)

    service = get_notification_service()
    app.state.notification_service = service
    logger.info("notification_service_started", **service.status()["store"])

    yield

    logger.info("application_shutdown")
    service.shutdown(wait=True)
