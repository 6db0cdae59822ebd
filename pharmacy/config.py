from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "Clinic Pharmacy"
    DATABASE_URL: str = "sqlite:///./pharmacy.db"

    # JWT signing
    SECRET_KEY: str = "change-me"
    ACCESS_TOKEN_EXPIRE_HOURS: int = 24

    # Calendar used for "today", by-month listings and monthly analytics
    BUSINESS_TIMEZONE: str = "Asia/Karachi"

    TOP_MEDICINES_LIMIT: int = 10
    MIN_PASSWORD_LENGTH: int = 6

    # Bootstrapped when the users table is empty
    DEFAULT_ADMIN_EMAIL: str = "admin@clinic.local"
    DEFAULT_ADMIN_PASSWORD: str = "admin123"
    DEFAULT_ADMIN_NAME: str = "Admin"

    # Comma-separated list of allowed origins, "*" for any
    CORS_ORIGINS: str = "*"

    LOG_LEVEL: str = "INFO"

    # uvicorn bind address for `pharmacy-server`
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    RELOAD: bool = False

    model_config = {"env_file": ".env"}


settings = Settings()
