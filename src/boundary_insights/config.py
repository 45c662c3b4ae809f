"""
Configuration management for the Boundary Insights engine and server.

This module handles the runtime settings: default analysis window,
privacy flags for tool output, concurrency limits and logging.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional


@dataclass
class AnalysisConfig:
    """Analysis defaults."""

    default_window: str = "month"
    min_interactions: int = 3


@dataclass
class PrivacyConfig:
    """Privacy-related configuration."""

    redact_by_default: bool = True
    hash_identifiers: bool = True
    redact_free_text: bool = True


@dataclass
class PerformanceConfig:
    """Performance-related configuration."""

    max_concurrent_analyses: int = 4
    max_relationships_per_call: int = 25


@dataclass
class ServerConfig:
    """MCP server settings."""

    log_level: str = "INFO"


@dataclass
class Config:
    """Main configuration class."""

    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    privacy: PrivacyConfig = field(default_factory=PrivacyConfig)
    performance: PerformanceConfig = field(default_factory=PerformanceConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    # Session-specific settings (not persisted)
    session_salt: Optional[bytes] = None

    def __post_init__(self):
        """Generate session salt on initialization."""
        if self.session_salt is None:
            self.session_salt = os.urandom(16)  # BLAKE2b max salt length

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Create config from dictionary."""
        return cls(
            analysis=AnalysisConfig(**data.get("analysis", {})),
            privacy=PrivacyConfig(**data.get("privacy", {})),
            performance=PerformanceConfig(**data.get("performance", {})),
            server=ServerConfig(**data.get("server", {})),
        )

    @classmethod
    def from_file(cls, path: Path) -> "Config":
        """Load config from JSON file."""
        if path.exists():
            with open(path) as f:
                data = json.load(f)
                return cls.from_dict(data)
        return cls()

    @classmethod
    def from_env(cls) -> "Config":
        """Create config from environment variables."""
        config = cls()

        # Analysis settings
        if env_val := os.getenv("BOUNDARY_DEFAULT_WINDOW"):
            config.analysis.default_window = env_val.lower()

        # Privacy settings
        if env_val := os.getenv("BOUNDARY_REDACT_DEFAULT"):
            config.privacy.redact_by_default = env_val.lower() == "true"

        if env_val := os.getenv("BOUNDARY_HASH_IDENTIFIERS"):
            config.privacy.hash_identifiers = env_val.lower() == "true"

        # Performance settings
        if env_val := os.getenv("BOUNDARY_MAX_CONCURRENT"):
            config.performance.max_concurrent_analyses = int(env_val)

        # Server settings
        if env_val := os.getenv("BOUNDARY_LOG_LEVEL"):
            config.server.log_level = env_val.upper()

        return config

    def should_redact(self, explicit_redact: Optional[bool] = None) -> bool:
        """Determine if redaction should be applied."""
        if explicit_redact is not None:
            return explicit_redact
        return self.privacy.redact_by_default


def load_config() -> Config:
    """Load configuration from file or environment."""
    # Check for config file in standard locations
    config_paths = [
        Path("config.json"),
        Path("~/.boundary-insights/config.json").expanduser(),
        Path("/etc/boundary-insights/config.json"),
    ]

    for path in config_paths:
        if path.exists():
            return Config.from_file(path)

    # Fall back to environment variables
    return Config.from_env()


# Global config instance (lazy loaded)
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config
