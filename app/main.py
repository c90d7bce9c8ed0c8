import uvicorn

from app.config.settings import Settings
from app.logging.logger import Log
from app.server import create_app


def main() -> None:
    """Entry point: load settings -> configure logging -> serve the app."""
    settings = Settings()
    Log.configure(settings.log_level)
    uvicorn.run(
        create_app(settings),
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
