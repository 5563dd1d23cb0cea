"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_var, optional_int_env_var, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError, UnsupportedNetworkError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .mirror_node import (
    NETWORK_BASE_URLS,
    MirrorNodeConfig,
    NetworkType,
    auth_headers_for,
    base_url_for,
    build_mirror_node_config,
    get_mirror_node_config,
)
from .registry import RegistryConfig, get_registry_config

__all__ = [
    "NETWORK_BASE_URLS",
    "ConfigurationError",
    "MirrorNodeConfig",
    "MissingConfigurationError",
    "NetworkType",
    "RateLimit",
    "RegistryConfig",
    "ResilienceConfig",
    "RetryPolicy",
    "UnsupportedNetworkError",
    "auth_headers_for",
    "base_url_for",
    "build_mirror_node_config",
    "get_mirror_node_config",
    "get_registry_config",
    "optional_env_var",
    "optional_int_env_var",
    "require_env_var",
    "require_env_vars",
]
