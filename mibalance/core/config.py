from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App settings
    PROJECT_NAME: str = "MiBalance"
    API_PREFIX: str = "/api"
    DEBUG: bool = Field(default=False)
    ENVIRONMENT: str = Field(default="development", validation_alias=AliasChoices("ENVIRONMENT", "APP_ENV"))
    LOG_LEVEL: str = Field(default="INFO")

    # Database
    DATABASE_URL: str = Field(default="sqlite:///./mibalance.db")

    # JWT Authentication
    JWT_SECRET_KEY: str = Field(
        default="change-me-in-production-4f1c2a9e8b7d",
        validation_alias=AliasChoices("JWT_SECRET", "JWT_SECRET_KEY"),
    )
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days

    # Password hashing cost
    BCRYPT_ROUNDS: int = Field(default=12)

    # CORS
    FRONTEND_URL: str = Field(default="http://localhost:3000")

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")


settings = Settings()
