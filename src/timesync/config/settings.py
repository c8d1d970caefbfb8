from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Run configuration with environment variable support (TIMESYNC_*).

    Built once at start-up and passed explicitly to the orchestrator and
    role engines; instances are frozen.
    """

    model_config = SettingsConfigDict(
        env_prefix="TIMESYNC_",
        env_file=".env",
        case_sensitive=True,
        frozen=True,
        extra="ignore",
    )

    # Sampling
    SAMPLE_SIZE: int = Field(1000, ge=1)

    # Remote launch
    REMOTE_LAUNCHER: str = "ssh"
    PROGRAM: Optional[str] = None
    REAP_TIMEOUT: float = Field(5.0, ge=0)

    # Listener
    BIND_HOST: str = ""
    PORT_BASE: int = Field(0, ge=0, le=65535)
    PORT_ATTEMPTS: int = Field(64, ge=1)
    ACCEPT_TIMEOUT: float = Field(60.0, gt=0)
    ACCEPT_POLL_INTERVAL: float = Field(0.5, gt=0)

    # Slave side connect
    CONNECT_TIMEOUT: float = Field(60.0, gt=0)
    CONNECT_RETRY_INTERVAL: float = Field(0.1, ge=0)

    # Per-operation socket timeout, None blocks forever
    IO_TIMEOUT: Optional[float] = 30.0

    # Logging
    LOG_LEVEL: str = "WARNING"
    LOG_PATH: Optional[str] = None
