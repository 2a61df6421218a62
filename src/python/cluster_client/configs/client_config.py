import logging
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from cluster_client.models import HostDescription, LoadBalancingStrategy

logger = logging.getLogger(__name__)

CONFIG_SECTION = "cluster_client"


class ClientConfig(BaseModel):
    """Settings of one cluster client.

    Build it directly, or load the ``cluster_client:`` section of a YAML
    file with :meth:`from_yaml`.
    """

    # Endpoints
    hosts: list[HostDescription] = Field(default_factory=lambda: [HostDescription(host="127.0.0.1", port=8529)])
    protocol: str = "http"
    verify_ssl: bool = True

    # Credentials
    user: str = "root"
    password: Optional[str] = None
    jwt: Optional[str] = None
    database: str = "_system"

    # Timeouts (seconds)
    timeout: float = 30.0
    connect_timeout: float = 5.0

    # Host list refresh
    acquire_host_list: bool = False
    acquire_host_list_interval: float = 3600.0

    # Failover
    load_balancing_strategy: LoadBalancingStrategy = LoadBalancingStrategy.NONE
    retry_passes: int = Field(default=3, ge=1)
    max_redirects: int = Field(default=3, ge=0)
    allow_dirty_read: bool = False

    @field_validator("hosts", mode="before")
    @classmethod
    def _parse_hosts(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = [part for part in value.split(",") if part.strip()]
        if isinstance(value, list):
            value = [HostDescription.parse(item) if isinstance(item, str) else item for item in value]
            if not value:
                raise ValueError("At least one host must be configured")
        return value

    @field_validator("protocol")
    @classmethod
    def _check_protocol(cls, value: str) -> str:
        value = value.lower()
        if value not in ("http", "https"):
            raise ValueError(f"Unsupported protocol: {value}")
        return value

    @classmethod
    def from_yaml(cls, config_path: str | Path) -> "ClientConfig":
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found at: {config_path}")

        with open(config_path, "r") as f:
            raw_config = yaml.safe_load(f) or {}

        config = cls.model_validate(raw_config.get(CONFIG_SECTION, {}))
        logger.info(f"ClientConfig loaded from {config_path}")
        return config
