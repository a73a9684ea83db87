from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = Field(..., alias="DATABASE_URL")
    # Isolation level for server databases; SQLite engines serialize writers with BEGIN IMMEDIATE instead.
    db_isolation_level: str = Field("SERIALIZABLE", alias="DB_ISOLATION_LEVEL")
    transaction_max_retries: int = Field(3, alias="TRANSACTION_MAX_RETRIES")
    transaction_timeout_seconds: float = Field(10.0, alias="TRANSACTION_TIMEOUT_SECONDS")

    # Identity tokens are issued by the external identity provider; only decoding happens here.
    jwt_secret_key: str = Field(..., alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(15, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    log_level: str = Field("INFO", alias="LOG_LEVEL")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
