"""Configuration loading for AdmitFlow.

Values come from an optional YAML file and are then overridden by
environment variables, so a deployment can ship a file and patch secrets in
through the environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_SCHOOL_CODE = "ELBA"
DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024  # 5MB
DEFAULT_MIN_PASSWORD_LENGTH = 8

IDENTITY_BACKENDS = ("local", "supabase")
STORAGE_BACKENDS = ("local", "supabase")


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""


@dataclass
class SupabaseConfig:
    """Connection settings for a Supabase project."""

    url: str = ""
    service_key: str = ""
    bucket: str = "student-documents"


@dataclass
class StorageConfig:
    """Blob storage settings.

    The local backend writes under ``local_dir`` and builds public URLs from
    ``public_base_url``.
    """

    backend: str = "local"
    local_dir: str = "uploads"
    public_base_url: str = "http://localhost:8000/uploads"


@dataclass
class LoggingConfig:
    """Logging settings passed to setup_logging."""

    log_dir: str | None = None
    level: str | None = None
    console: bool = True


@dataclass
class AdmitFlowConfig:
    """AdmitFlow service configuration."""

    db_path: str = "admitflow.db"
    school_code: str = DEFAULT_SCHOOL_CODE
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    min_password_length: int = DEFAULT_MIN_PASSWORD_LENGTH
    identity_backend: str = "local"
    storage: StorageConfig = field(default_factory=StorageConfig)
    supabase: SupabaseConfig = field(default_factory=SupabaseConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AdmitFlowConfig:
        """Create config from dictionary.

        Args:
            data: Configuration dictionary from YAML.

        Returns:
            Parsed configuration object.

        Raises:
            ConfigError: If a value has the wrong type or is out of range.
        """
        storage_data = data.get("storage", {}) or {}
        storage = StorageConfig(
            backend=storage_data.get("backend", "local"),
            local_dir=storage_data.get("local_dir", "uploads"),
            public_base_url=storage_data.get("public_base_url", "http://localhost:8000/uploads"),
        )

        supabase_data = data.get("supabase", {}) or {}
        supabase = SupabaseConfig(
            url=supabase_data.get("url", ""),
            service_key=supabase_data.get("service_key", ""),
            bucket=supabase_data.get("bucket", "student-documents"),
        )

        logging_data = data.get("logging", {}) or {}
        logging_config = LoggingConfig(
            log_dir=logging_data.get("log_dir"),
            level=logging_data.get("level"),
            console=bool(logging_data.get("console", True)),
        )

        config = cls(
            db_path=str(data.get("db_path", "admitflow.db")),
            school_code=str(data.get("school_code", DEFAULT_SCHOOL_CODE)),
            max_upload_bytes=_as_int(data, "max_upload_bytes", DEFAULT_MAX_UPLOAD_BYTES),
            min_password_length=_as_int(data, "min_password_length", DEFAULT_MIN_PASSWORD_LENGTH),
            identity_backend=str(data.get("identity_backend", "local")),
            storage=storage,
            supabase=supabase,
            logging=logging_config,
        )
        config.validate()
        return config

    @classmethod
    def from_env(cls, base: AdmitFlowConfig | None = None) -> AdmitFlowConfig:
        """Apply environment variable overrides on top of ``base``.

        Recognised variables: ADMITFLOW_DB_PATH, ADMITFLOW_SCHOOL_CODE,
        ADMITFLOW_MAX_UPLOAD_BYTES, ADMITFLOW_IDENTITY_BACKEND,
        ADMITFLOW_STORAGE_BACKEND, ADMITFLOW_UPLOAD_DIR, SUPABASE_URL,
        SUPABASE_SERVICE_ROLE_KEY, SUPABASE_BUCKET.
        """
        config = base if base is not None else cls()
        env = os.environ

        if "ADMITFLOW_DB_PATH" in env:
            config.db_path = env["ADMITFLOW_DB_PATH"]
        if "ADMITFLOW_SCHOOL_CODE" in env:
            config.school_code = env["ADMITFLOW_SCHOOL_CODE"]
        if "ADMITFLOW_MAX_UPLOAD_BYTES" in env:
            config.max_upload_bytes = _as_int(env, "ADMITFLOW_MAX_UPLOAD_BYTES", 0)
        if "ADMITFLOW_IDENTITY_BACKEND" in env:
            config.identity_backend = env["ADMITFLOW_IDENTITY_BACKEND"]
        if "ADMITFLOW_STORAGE_BACKEND" in env:
            config.storage.backend = env["ADMITFLOW_STORAGE_BACKEND"]
        if "ADMITFLOW_UPLOAD_DIR" in env:
            config.storage.local_dir = env["ADMITFLOW_UPLOAD_DIR"]
        if "SUPABASE_URL" in env:
            config.supabase.url = env["SUPABASE_URL"]
        if "SUPABASE_SERVICE_ROLE_KEY" in env:
            config.supabase.service_key = env["SUPABASE_SERVICE_ROLE_KEY"]
        if "SUPABASE_BUCKET" in env:
            config.supabase.bucket = env["SUPABASE_BUCKET"]

        config.validate()
        return config

    def validate(self) -> None:
        """Check cross-field constraints.

        Raises:
            ConfigError: If the configuration cannot be used.
        """
        if not self.school_code.isalpha() or not self.school_code.isupper():
            raise ConfigError(f"school_code must be upper-case letters, got {self.school_code!r}")
        if not 3 <= len(self.school_code) <= 4:
            raise ConfigError("school_code must be 3 or 4 letters long")
        if self.max_upload_bytes <= 0:
            raise ConfigError("max_upload_bytes must be positive")
        if self.min_password_length < 1:
            raise ConfigError("min_password_length must be at least 1")
        if self.identity_backend not in IDENTITY_BACKENDS:
            raise ConfigError(f"Unknown identity backend: {self.identity_backend}")
        if self.storage.backend not in STORAGE_BACKENDS:
            raise ConfigError(f"Unknown storage backend: {self.storage.backend}")
        uses_supabase = "supabase" in (self.identity_backend, self.storage.backend)
        if uses_supabase and not (self.supabase.url and self.supabase.service_key):
            raise ConfigError("Supabase backend selected but SUPABASE_URL/service key missing")


def _as_int(data: Any, key: str, default: int) -> int:
    value = data.get(key, default)
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key} must be an integer, got {value!r}") from e


def load_config(config_path: Path | str | None = None) -> AdmitFlowConfig:
    """Load AdmitFlow configuration.

    Reads the YAML file at ``config_path`` (or ADMITFLOW_CONFIG) when given,
    then applies environment overrides.

    Args:
        config_path: Path to an admitflow.yaml file (optional).

    Returns:
        Parsed configuration object.

    Raises:
        ConfigError: If the file doesn't exist or is invalid.
    """
    if config_path is None:
        config_path = os.environ.get("ADMITFLOW_CONFIG")

    if config_path is None:
        return AdmitFlowConfig.from_env()

    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration must be a YAML mapping, got {type(data).__name__}")

    return AdmitFlowConfig.from_env(AdmitFlowConfig.from_dict(data))
