"""
Application configuration settings loaded from environment variables.
Uses pydantic_settings for validation and type conversion.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional

class Settings(BaseSettings):
    """
    Application settings class with environment variable validation.

    Attributes:
        app_name: Display name used in the OpenAPI document and logs
        log_level: Root logging level
        database_url: SQLAlchemy connection string
        secret_key: Secret key for JWT token signing
        algorithm: Algorithm used for JWT signing (typically HS256)
        access_token_expire_minutes: Access token lifetime in minutes
        bcrypt_rounds: bcrypt work factor used for password hashing
        cors_origins: Origins allowed by the CORS middleware

        # Bootstrap admin settings (optional)
        bootstrap_admin_email: Optional admin email for first admin creation
        bootstrap_admin_password: Optional admin password for first admin creation
    """
    app_name: str = "dabetai API"
    log_level: str = "INFO"

    # Database settings
    database_url: str = "sqlite:///./dabetai.db"

    # JWT settings
    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    # Password hashing
    bcrypt_rounds: int = 10

    # Frontend settings
    cors_origins: List[str] = ["http://localhost:3000"]

    # Bootstrap admin settings (optional - only used for first admin creation)
    bootstrap_admin_email: Optional[str] = None
    bootstrap_admin_password: Optional[str] = None

    # Environment variables loading
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

# Create settings instance
settings = Settings()
