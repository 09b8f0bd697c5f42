import uvicorn

from config.logging_config import LOGGING_CONFIG
from config.settings import get_settings
from pawpal.main import app

__all__ = ["app"]


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.app_host,
        port=settings.app_port,
        log_level=settings.log_level.lower(),
        log_config=LOGGING_CONFIG,
    )
