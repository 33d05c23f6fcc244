from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration read from the environment (or a local .env file).

    An instance is built once at startup and handed to `create_app`, which
    keeps it on `app.state` for the request dependencies that need it.
    """

    # Database Connection
    DATABASE_URL: str = "sqlite:///./snackbar.db"

    # Basic Authentication
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: str = "password123"

    # Server
    HOST: str = "127.0.0.1"
    PORT: int = 3333
    LOG_LEVEL: str = "INFO"

    # Upper bound for a single sale read/write, in seconds
    REQUEST_TIMEOUT_SECONDS: float | None = 30.0

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
