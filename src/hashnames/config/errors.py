"""Errors raised while assembling hashnames configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


class ConfigurationError(RuntimeError):
    """A configuration value is invalid, or a required collaborator is not configured."""


class MissingConfigurationError(ConfigurationError):
    """One or more required environment variables are absent or blank."""

    def __init__(self, names: Iterable[str]) -> None:
        self.names = tuple(sorted(names))
        super().__init__(f"Missing configuration for: {', '.join(self.names)}")


class UnsupportedNetworkError(ConfigurationError):
    """``HASHNAMES_NETWORK`` names a network without a known mirror node."""

    def __init__(self, value: str, choices: Iterable[str]) -> None:
        self.value = value
        super().__init__(
            f"Unsupported HASHNAMES_NETWORK {value!r} (expected one of: {', '.join(choices)})"
        )
