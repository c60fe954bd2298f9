"""Frozen dataclasses for configuration and YAML loader with env-var interpolation."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigError

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")


def _interpolate_env(value: str) -> str:
    """Replace ${ENV_VAR} placeholders with environment variable values."""

    def _replace(match: re.Match) -> str:
        env_key = match.group(1)
        env_val = os.environ.get(env_key)
        if env_val is None:
            raise ConfigError(f"Environment variable '{env_key}' is not set")
        return env_val

    return _ENV_PATTERN.sub(_replace, value)


def _walk_and_interpolate(obj: Any) -> Any:
    """Recursively interpolate env vars in strings throughout a nested structure."""
    if isinstance(obj, str):
        return _interpolate_env(obj)
    if isinstance(obj, dict):
        return {k: _walk_and_interpolate(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_walk_and_interpolate(v) for v in obj]
    return obj


@dataclass(frozen=True)
class KubernetesConfig:
    kubeconfig: str | None = "/usr/local/etc/kubeconfig"  # empty or null = in-cluster service account
    label_selector: str = "monitor=proxy"
    request_timeout_seconds: float = 10


@dataclass(frozen=True)
class NginxConfig:
    template_path: str = "/usr/local/etc/nginx-template.conf"
    output_path: str = "/etc/nginx/sites-available/reverse-proxy.conf"
    port: int = 32657
    reload_command: list[str] = field(default_factory=lambda: ["systemctl", "restart", "nginx"])
    reload_timeout_seconds: float = 30
    retry_failed_reload: bool = True


@dataclass(frozen=True)
class PollingConfig:
    interval_seconds: float = 60
    jitter_seconds: float = 0


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"
    format: str = "json"  # "json" or "text"


@dataclass(frozen=True)
class AppConfig:
    kubernetes: KubernetesConfig = field(default_factory=KubernetesConfig)
    nginx: NginxConfig = field(default_factory=NginxConfig)
    polling: PollingConfig = field(default_factory=PollingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _build_nested(cls: type, data: dict[str, Any]) -> Any:
    """Construct a frozen dataclass, recursively building nested dataclass fields."""
    if not isinstance(data, dict):
        return data
    field_types = {f.name: f.type for f in cls.__dataclass_fields__.values()}
    kwargs: dict[str, Any] = {}
    for key, value in data.items():
        if key not in field_types:
            continue
        ft = field_types[key]
        # Resolve string annotations to actual types in the module scope
        if isinstance(ft, str):
            ft = eval(ft, globals(), {cls.__name__: cls})  # noqa: S307
        if isinstance(ft, type) and hasattr(ft, "__dataclass_fields__"):
            # "section:" with nothing under it parses as None
            if value is None:
                value = {}
            if not isinstance(value, dict):
                raise ConfigError(f"'{key}' must be a mapping, got {type(value).__name__}")
            kwargs[key] = _build_nested(ft, value)
        else:
            kwargs[key] = value
    return cls(**kwargs)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def load_config(path: str | Path) -> AppConfig:
    """Load and validate configuration from a YAML file."""
    path = Path(path)
    if not path.is_file():
        raise ConfigError(f"Configuration file not found: {path}")

    with open(path) as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Configuration file is not valid YAML: {exc}") from exc

    # An empty file means "all defaults"
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError("Configuration file must be a YAML mapping")

    raw = _walk_and_interpolate(raw)
    config = _build_nested(AppConfig, raw)
    _validate(config)
    return config


def _validate(config: AppConfig) -> None:
    """Validate configuration values."""
    # Empty or null kubeconfig means in-cluster credentials
    if config.kubernetes.kubeconfig is not None and not isinstance(config.kubernetes.kubeconfig, str):
        raise ConfigError("kubernetes.kubeconfig must be a string")

    if not isinstance(config.kubernetes.label_selector, str) or not config.kubernetes.label_selector:
        raise ConfigError("kubernetes.label_selector is required")

    if not _is_number(config.kubernetes.request_timeout_seconds) or config.kubernetes.request_timeout_seconds <= 0:
        raise ConfigError("kubernetes.request_timeout_seconds must be a number > 0")

    if not isinstance(config.nginx.template_path, str) or not config.nginx.template_path:
        raise ConfigError("nginx.template_path is required")

    if not isinstance(config.nginx.output_path, str) or not config.nginx.output_path:
        raise ConfigError("nginx.output_path is required")

    port = config.nginx.port
    if isinstance(port, bool) or not isinstance(port, int) or not 1 <= port <= 65535:
        raise ConfigError("nginx.port must be an integer between 1 and 65535")

    command = config.nginx.reload_command
    if not isinstance(command, list) or not command or not all(isinstance(arg, str) and arg for arg in command):
        raise ConfigError("nginx.reload_command must be a non-empty list of strings")

    if not _is_number(config.nginx.reload_timeout_seconds) or config.nginx.reload_timeout_seconds <= 0:
        raise ConfigError("nginx.reload_timeout_seconds must be a number > 0")

    # The string "false" would otherwise be truthy
    if not isinstance(config.nginx.retry_failed_reload, bool):
        raise ConfigError("nginx.retry_failed_reload must be true or false")

    if not _is_number(config.polling.interval_seconds) or config.polling.interval_seconds < 1:
        raise ConfigError("polling.interval_seconds must be a number >= 1")

    if not _is_number(config.polling.jitter_seconds) or config.polling.jitter_seconds < 0:
        raise ConfigError("polling.jitter_seconds must be a number >= 0")

    if not isinstance(config.logging.level, str):
        raise ConfigError("logging.level must be a string")

    if config.logging.format not in ("json", "text"):
        raise ConfigError("logging.format must be 'json' or 'text'")
