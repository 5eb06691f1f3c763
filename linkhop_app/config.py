from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings.

    The defaults are the service's fixed deployment values. Loading priority
    (highest to lowest):
    1. LINKHOP_* environment variables
    2. .env file
    3. Default values below
    """

    # Application
    app_name: str = "linkhop"
    app_version: str = "1.0.0"

    # Where a bare "/" on the public listener redirects to
    root_url: str = "https://github.com/tendstofortytwo/tendsto"

    # Public redirect listener
    public_host: str = "0.0.0.0"
    public_port: int = 4242

    # Admin listener (tailnet only)
    admin_hostname: str = "tendsto"  # Tailscale node hostname
    admin_port: int = 443
    admin_bind_host: Optional[str] = None  # None = ask tailscaled for the node address
    tls_dir: str = "certs"
    tailscale_bin: str = "tailscale"

    # Database
    database_url: str = "sqlite:///./urls.db"

    # Admin page template
    templates_dir: str = "templates"
    admin_template: str = "add.html"

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None  # stdout only when unset

    model_config = SettingsConfigDict(
        env_prefix="LINKHOP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Create settings instance
settings = Settings()
