"""Configuration models and encrypted persistence utilities for the file analyzer client."""

import json
from pathlib import Path
from typing import Any, Dict

from cryptography.fernet import Fernet, InvalidToken
from pydantic import BaseModel, Field, field_validator

from core.models import UploadMode


CONFIG_FILE_NAME = "config.json"
CONFIG_KEY_FILE = "key.key"
CONFIG_VERSION = 1
DEFAULT_BASE_URL = "http://localhost:8080"


class ConnectionOptions(BaseModel):
    """How to reach the analysis service."""

    base_url: str = Field(default=DEFAULT_BASE_URL, description="Scheme and host of the analysis service.")
    timeout: int = Field(default=30, ge=1, le=600, description="Per-request timeout in seconds.")
    download_retries: int = Field(
        default=2, ge=0, le=5, description="Retries for archive downloads on gateway errors."
    )

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, value: str) -> str:
        """Fall back to the local default and drop trailing slashes so paths join cleanly."""
        value = (value or "").strip()
        if not value:
            return DEFAULT_BASE_URL
        return value.rstrip("/")


class AppConfig(BaseModel):
    """Root persisted configuration including the optional access token."""

    version: int = CONFIG_VERSION
    api_token: str = ""
    output_dir: str = ""
    upload_mode: UploadMode = UploadMode.SINGLE
    options: ConnectionOptions = Field(default_factory=ConnectionOptions)

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the configuration to a JSON compatible dictionary."""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "AppConfig":
        """Create a configuration instance while tolerating older payloads."""
        if not payload:
            return cls()
        payload = dict(payload)
        # Early config files had no version/options sections
        if "options" not in payload:
            payload["options"] = {}
        if "version" not in payload:
            payload["version"] = 0
        return cls(**payload)


class ConfigManager:
    """Manage encrypted configuration persistence."""

    def __init__(self, config_path: Path | str | None = None, key_path: Path | str | None = None) -> None:
        """Set up file paths and ensure the encryption key exists."""
        resolved_config = Path(config_path).expanduser() if config_path else None
        base_dir = resolved_config.parent if resolved_config else Path(".")
        self._config_path = resolved_config if resolved_config else base_dir / CONFIG_FILE_NAME
        self._key_path = Path(key_path).expanduser() if key_path else base_dir / CONFIG_KEY_FILE
        self._ensure_key_exists()

    @property
    def config_path(self) -> Path:
        return self._config_path

    @property
    def key_path(self) -> Path:
        return self._key_path

    def _ensure_key_exists(self) -> None:
        """Create a new Fernet key if no encryption key exists yet."""
        if not self._key_path.exists():
            self._key_path.write_bytes(Fernet.generate_key())

    def _get_cipher(self) -> Fernet:
        return Fernet(self._key_path.read_bytes())

    def load(self) -> AppConfig:
        """Load configuration, decrypting the access token when necessary."""
        if not self._config_path.exists():
            return AppConfig()

        with self._config_path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)

        if payload.get("api_token"):
            try:
                cipher = self._get_cipher()
                payload["api_token"] = cipher.decrypt(payload["api_token"].encode()).decode()
            except (InvalidToken, ValueError):
                # Plain text token written by hand or by an older release
                pass

        return AppConfig.from_dict(payload)

    def save(self, config: AppConfig) -> None:
        """Persist configuration while encrypting the access token on disk."""
        payload = config.to_dict()

        if payload.get("api_token"):
            cipher = self._get_cipher()
            payload["api_token"] = cipher.encrypt(payload["api_token"].encode()).decode()

        with self._config_path.open("w", encoding="utf-8") as handle:
            json.dump(payload, handle, ensure_ascii=False, indent=2)
