import logging
import sys
from functools import lru_cache
from ipaddress import IPv4Address
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

# Look for .env in the project root
_env_file = Path(__file__).resolve().parent.parent.parent / ".env"

logger = logging.getLogger(__name__)

DEFAULT_GATEWAY = IPv4Address("192.168.42.1")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="PORTAL_", env_file=_env_file, extra="ignore")

    # Environment
    env: Literal["development", "production"] = "development"

    # HTTP listener - binds on the gateway address, all clients are redirected here
    gateway: IPv4Address = DEFAULT_GATEWAY
    listening_port: int = 80

    # Hotspot served while the device is unconfigured
    interface: str = "wlan0"
    ssid: str = "WiFi Connect"
    passphrase: str = ""  # empty = open network

    # Web UI assets (index.html, css/, js/, img/, static/)
    ui_directory: str = ""  # defaults to ui/ in the project root

    # CORS - comma-separated origins or "*" for all
    cors_origins: str = "*"

    log_level: str = "INFO"

    # Seconds to wait for in-flight requests when the server stops
    shutdown_grace_seconds: int = 5

    @property
    def resolved_ui_directory(self) -> str:
        """Return the UI directory, defaulting to ui/ in the project root."""
        if self.ui_directory:
            return self.ui_directory
        return str(Path(__file__).resolve().parent.parent.parent / "ui")

    @property
    def is_production(self) -> bool:
        return self.env == "production"


def validate_settings(settings: Settings) -> None:
    """Validate settings and exit with helpful error messages."""
    errors = []

    if not 1 <= len(settings.ssid) <= 32:
        errors.append("PORTAL_SSID must be between 1 and 32 characters")

    if settings.passphrase and not 8 <= len(settings.passphrase) <= 63:
        errors.append("PORTAL_PASSPHRASE must be between 8 and 63 characters when set")

    if not 0 < settings.listening_port < 65536:
        errors.append("PORTAL_LISTENING_PORT must be a valid TCP port")

    if not Path(settings.resolved_ui_directory).is_dir():
        logger.warning(
            "UI directory %s not found - only the API will be served",
            settings.resolved_ui_directory,
        )

    if errors:
        for error in errors:
            logger.error("Configuration error: %s", error)
        sys.exit(1)


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    validate_settings(settings)
    return settings
