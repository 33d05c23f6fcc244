import uvicorn

from snackbar.api.main import create_app
from snackbar.core.config import Settings


def main() -> None:
    settings = Settings()
    uvicorn.run(
        create_app(settings),
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )

if __name__ == "__main__":
    main()
