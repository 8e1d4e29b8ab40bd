"""Configuration management for artisync.

Settings come from a YAML file with environment variable overrides.
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

import yaml

from artisync.core.exceptions import ConfigurationError

# =============================================================================
# Constants
# =============================================================================

CONFIG_DIR = Path.home() / ".config" / "artisync"
CONFIG_FILE = CONFIG_DIR / "config.yaml"

DEFAULT_HEADERS = {"Cache-Control": "public, max-age=2628000"}

# Environment variable names
ENV_CONFIG = "ARTISYNC_CONFIG"
ENV_HASH_CONCURRENCY = "ARTISYNC_HASH_CONCURRENCY"
ENV_HASH_CHUNK_SIZE = "ARTISYNC_HASH_CHUNK_SIZE"
ENV_HASH_TIMEOUT = "ARTISYNC_HASH_TIMEOUT"
ENV_HASH_STRICT = "ARTISYNC_HASH_STRICT"
ENV_UPLOAD_CONCURRENCY = "ARTISYNC_UPLOAD_CONCURRENCY"
ENV_MAX_RETRIES = "ARTISYNC_MAX_RETRIES"
ENV_CONNECT_TIMEOUT = "ARTISYNC_CONNECT_TIMEOUT"
ENV_TIMEOUT = "ARTISYNC_TIMEOUT"
ENV_BASE_DELAY = "ARTISYNC_BASE_DELAY"
ENV_FILE_ATTEMPTS = "ARTISYNC_FILE_ATTEMPTS"
ENV_PROGRESS_POLICY = "ARTISYNC_PROGRESS_POLICY"

TRUE_VALUES = ("true", "1", "yes")


# =============================================================================
# Settings
# =============================================================================


@dataclass
class HashSettings:
    """Settings for the parallel hashing dispatcher."""

    concurrency: int = 8
    chunk_size: int = 50
    job_timeout: float = 300.0
    strict: bool = False
    algorithm: str = "md5"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HashSettings":
        """Create from dictionary."""
        return cls(
            concurrency=int(data.get("concurrency", 8)),
            chunk_size=int(data.get("chunk_size", 50)),
            job_timeout=float(data.get("job_timeout", 300.0)),
            strict=bool(data.get("strict", False)),
            algorithm=str(data.get("algorithm", "md5")),
        )


@dataclass
class UploadSettings:
    """Settings for the batch and single-file uploaders."""

    concurrency: int = 15
    connect_timeout: float = 10.0
    timeout: float = 300.0
    max_retries: int = 5
    base_delay: float = 1.0
    max_delay: float = 16.0
    file_attempts: int = 5
    file_retry_delay: float = 1.0
    progress_policy: str = "cap"
    default_headers: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_HEADERS))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UploadSettings":
        """Create from dictionary."""
        headers = data.get("default_headers")
        if headers is None:
            headers = dict(DEFAULT_HEADERS)
        elif not isinstance(headers, dict):
            raise ConfigurationError(
                "default_headers must be a mapping", field="default_headers", value=headers
            )
        return cls(
            concurrency=int(data.get("concurrency", 15)),
            connect_timeout=float(data.get("connect_timeout", 10.0)),
            timeout=float(data.get("timeout", 300.0)),
            max_retries=int(data.get("max_retries", 5)),
            base_delay=float(data.get("base_delay", 1.0)),
            max_delay=float(data.get("max_delay", 16.0)),
            file_attempts=int(data.get("file_attempts", 5)),
            file_retry_delay=float(data.get("file_retry_delay", 1.0)),
            progress_policy=str(data.get("progress_policy", "cap")).lower(),
            default_headers={str(k): str(v) for k, v in headers.items()},
        )


# =============================================================================
# Config
# =============================================================================


def _env_override(target: Any, attr: str, env_name: str, cast: Callable[[str], Any]) -> None:
    raw = os.getenv(env_name)
    if raw is None or raw == "":
        return
    try:
        setattr(target, attr, cast(raw))
    except ValueError as e:
        raise ConfigurationError(f"Invalid value for {env_name}: {e}", field=env_name, value=raw)


def _parse_bool(raw: str) -> bool:
    return raw.lower() in TRUE_VALUES


@dataclass
class Config:
    """Application configuration."""

    hashing: HashSettings = field(default_factory=HashSettings)
    upload: UploadSettings = field(default_factory=UploadSettings)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Config":
        """Load config from file with environment variable overrides.

        Priority (highest to lowest):
        1. Environment variables
        2. Config file
        3. Defaults

        Args:
            config_path: Optional path to config file. Falls back to
                ``ARTISYNC_CONFIG`` and then ``~/.config/artisync/config.yaml``.

        Returns:
            Loaded configuration.

        Raises:
            ConfigurationError: If the file or an override is invalid.
        """
        env_path = os.getenv(ENV_CONFIG)
        path = config_path or (Path(env_path) if env_path else CONFIG_FILE)
        config = cls()

        if path.exists():
            try:
                with open(path) as f:
                    data = yaml.safe_load(f) or {}
                if not isinstance(data, dict):
                    raise ConfigurationError("Config root must be a mapping")
                config.hashing = HashSettings.from_dict(data.get("hashing") or {})
                config.upload = UploadSettings.from_dict(data.get("upload") or {})
            except ConfigurationError:
                raise
            except Exception as e:
                raise ConfigurationError(f"Failed to load config: {e}")

        _env_override(config.hashing, "concurrency", ENV_HASH_CONCURRENCY, int)
        _env_override(config.hashing, "chunk_size", ENV_HASH_CHUNK_SIZE, int)
        _env_override(config.hashing, "job_timeout", ENV_HASH_TIMEOUT, float)
        _env_override(config.hashing, "strict", ENV_HASH_STRICT, _parse_bool)
        _env_override(config.upload, "concurrency", ENV_UPLOAD_CONCURRENCY, int)
        _env_override(config.upload, "max_retries", ENV_MAX_RETRIES, int)
        _env_override(config.upload, "connect_timeout", ENV_CONNECT_TIMEOUT, float)
        _env_override(config.upload, "timeout", ENV_TIMEOUT, float)
        _env_override(config.upload, "base_delay", ENV_BASE_DELAY, float)
        _env_override(config.upload, "file_attempts", ENV_FILE_ATTEMPTS, int)
        _env_override(config.upload, "progress_policy", ENV_PROGRESS_POLICY, str.lower)

        config.validate()
        return config

    def validate(self) -> None:
        """Check value ranges.

        Raises:
            ConfigurationError: If a setting is out of range.
        """
        for name in ("concurrency", "chunk_size"):
            value = getattr(self.hashing, name)
            if value < 1:
                raise ConfigurationError(f"hashing.{name} must be at least 1", field=name, value=value)
        if self.upload.concurrency < 1:
            raise ConfigurationError(
                "upload.concurrency must be at least 1",
                field="concurrency",
                value=self.upload.concurrency,
            )
        if self.upload.max_retries < 0:
            raise ConfigurationError(
                "upload.max_retries cannot be negative",
                field="max_retries",
                value=self.upload.max_retries,
            )
        if self.upload.file_attempts < 1:
            raise ConfigurationError(
                "upload.file_attempts must be at least 1",
                field="file_attempts",
                value=self.upload.file_attempts,
            )
        if self.upload.progress_policy.lower() not in ("cap", "rebase"):
            raise ConfigurationError(
                "upload.progress_policy must be 'cap' or 'rebase'",
                field="progress_policy",
                value=self.upload.progress_policy,
            )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"hashing": asdict(self.hashing), "upload": asdict(self.upload)}

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save config to file.

        Args:
            config_path: Optional path to config file.
        """
        path = config_path or CONFIG_FILE
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)
