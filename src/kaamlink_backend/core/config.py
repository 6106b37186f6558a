"""Application configuration management."""

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Database Configuration
    postgres_host: str = Field(default="localhost", description="PostgreSQL host")
    postgres_port: int = Field(default=5432, description="PostgreSQL port")
    postgres_db: str = Field(default="kaamlink_db", description="PostgreSQL database name")
    postgres_user: str = Field(default="kaamlink_user", description="PostgreSQL username")
    postgres_password: str = Field(default="", description="PostgreSQL password")
    custom_database_url: Optional[str] = Field(default=None, description="Full database URL override")
    db_pool_size: int = Field(default=10, description="Pooled connections per process")
    db_max_overflow: int = Field(default=20, description="Extra connections beyond the pool")

    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")
    secret_key: str = Field(default="dev-secret-key", description="JWT secret key")
    algorithm: str = Field(default="HS256", description="JWT algorithm")
    access_token_expire_minutes: int = Field(default=60 * 24, description="Token expiry minutes")

    # Shift verification
    otp_ttl_seconds: int = Field(default=300, description="Lifetime of a shift OTP in seconds")

    # Payment gateway
    razorpay_key_id: Optional[str] = Field(default=None, description="Razorpay key id")
    razorpay_key_secret: Optional[str] = Field(default=None, description="Razorpay key secret")
    razorpay_api_base: str = Field(default="https://api.razorpay.com/v1", description="Razorpay REST base URL")
    razorpay_timeout_seconds: float = Field(default=10.0, description="Razorpay request timeout")

    # Application Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    environment: str = Field(default="development", description="Environment name")

    @property
    def database_url(self) -> str:
        """Construct database URL from components."""
        if self.custom_database_url:
            return self.custom_database_url
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )


# Global settings instance
settings = Settings()
