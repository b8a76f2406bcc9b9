"""Configuration management for the identity resolution engine.

Loads settings from environment variables using Pydantic. Provides
sensible defaults for all settings while allowing override via
environment or keyword arguments.

A Settings instance is created once at process start and passed down
explicitly to the engine and every analyzer.

Provides:
- Settings: Pydantic model with all engine settings
- load_settings: Factory function to create Settings instance
"""

import os

from pydantic import BaseModel, Field


def _env_flag(name: str, default: bool = True) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str) -> int | None:
    value = os.getenv(name)
    return int(value) if value else None


class Settings(BaseModel):
    """Engine configuration.

    Attributes:
        hints_file: Optional external hint file (URL, local path or packaged resource name)
        analyzer_hint_enabled: Whether the hint analyzer runs
        analyzer_dependency_merging_enabled: Whether the merging analyzer runs
        analyzer_ruby_bundler_enabled: Whether bundler package paths are resolved
        analyzer_swift_package_manager_enabled: Whether Package.swift package paths are resolved
        analyzer_cocoapods_enabled: Whether podspec package paths are resolved
        proxy_server: Proxy host used for remote hint files
        proxy_port: Proxy port
        proxy_username: Optional proxy user
        proxy_password: Optional proxy password
        download_timeout: Total timeout in seconds for one download attempt
        temp_directory: Directory for temporary files (system default when unset)
    """

    # Hint rules
    hints_file: str | None = Field(
        default_factory=lambda: os.getenv("DEPIDENT_HINTS_FILE") or None
    )

    # Analyzer toggles
    analyzer_hint_enabled: bool = Field(
        default_factory=lambda: _env_flag("DEPIDENT_ANALYZER_HINT_ENABLED")
    )
    analyzer_dependency_merging_enabled: bool = Field(
        default_factory=lambda: _env_flag("DEPIDENT_ANALYZER_DEPENDENCY_MERGING_ENABLED")
    )
    analyzer_ruby_bundler_enabled: bool = Field(
        default_factory=lambda: _env_flag("DEPIDENT_ANALYZER_RUBY_BUNDLER_ENABLED")
    )
    analyzer_swift_package_manager_enabled: bool = Field(
        default_factory=lambda: _env_flag("DEPIDENT_ANALYZER_SWIFT_PACKAGE_MANAGER_ENABLED")
    )
    analyzer_cocoapods_enabled: bool = Field(
        default_factory=lambda: _env_flag("DEPIDENT_ANALYZER_COCOAPODS_ENABLED")
    )

    # Proxy
    proxy_server: str | None = Field(
        default_factory=lambda: os.getenv("DEPIDENT_PROXY_SERVER") or None
    )
    proxy_port: int | None = Field(
        default_factory=lambda: _env_int("DEPIDENT_PROXY_PORT")
    )
    proxy_username: str | None = Field(
        default_factory=lambda: os.getenv("DEPIDENT_PROXY_USERNAME") or None
    )
    proxy_password: str | None = Field(
        default_factory=lambda: os.getenv("DEPIDENT_PROXY_PASSWORD") or None
    )

    # Downloads and temp files
    download_timeout: float = Field(default=30.0)
    temp_directory: str | None = Field(default=None)

    @property
    def proxy_url(self) -> str | None:
        """Proxy URL built from proxy_server/proxy_port, or None when no proxy is set."""
        if not self.proxy_server:
            return None
        server = self.proxy_server
        if "://" not in server:
            server = f"http://{server}"
        if self.proxy_port:
            server = f"{server}:{self.proxy_port}"
        return server

    def is_analyzer_enabled(self, key: str | None) -> bool:
        """Look up an analyzer toggle by attribute name.

        Analyzers without a toggle (key is None) are always enabled.
        """
        if key is None:
            return True
        return bool(getattr(self, key, True))


def load_settings(**overrides) -> Settings:
    """Load settings from environment, applying keyword overrides.

    Returns:
        Populated Settings instance
    """
    return Settings(**overrides)
