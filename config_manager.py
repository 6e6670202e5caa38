"""
Configuration management for the Surfside tracker demo.
Handles loading, validating, and providing access to tracker settings.
"""

import os
import json
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass

from surfside_tracker.event_types import Environment


@dataclass
class TrackerConfig:
    """Tracker configuration settings."""
    namespace: str
    environment: str
    endpoint: Optional[str]
    account_id: str
    source_id: str
    app_id: Optional[str]
    platform: str

    @property
    def collector_endpoint(self) -> str:
        """Explicit endpoint if set, otherwise the environment's collector."""
        return self.endpoint or Environment.from_name(self.environment).endpoint


@dataclass
class EmitterConfig:
    """Emitter delivery settings."""
    batch_size: Optional[int]
    max_attempts: int
    retry_delay: float
    backoff_factor: float
    request_timeout: float

    def as_options(self) -> Dict[str, Any]:
        """Keyword arguments for TrackerRegistry.initialize."""
        return {
            "batch_size": self.batch_size,
            "max_attempts": self.max_attempts,
            "retry_delay": self.retry_delay,
            "backoff_factor": self.backoff_factor,
            "request_timeout": self.request_timeout,
        }


@dataclass
class AppConfig:
    """Demo application configuration settings."""
    host: str
    port: int
    debug: bool


class ConfigManager:
    """Manages application configuration loading and access."""

    def __init__(self, config_file: str = "tracker_config.json"):
        self.config_file = Path(config_file)
        self._config: Optional[Dict[str, Any]] = None
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from file and environment variables."""
        # Start with default config
        self._config = self._get_default_config()

        # Load base config from file
        if self.config_file.exists():
            try:
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    file_config = json.load(f)
                    self._merge_config(file_config)
            except (json.JSONDecodeError, FileNotFoundError):
                # Keep default config if file is invalid or not found
                pass

        # Override with environment variables
        self._override_with_env()

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration."""
        return {
            "tracker": {
                "namespace": "iosTracker",
                "environment": "development",
                "endpoint": None,
                "account_id": "00000-1",
                "source_id": "00000-2",
                "app_id": None,
                "platform": "mob"
            },
            "emitter": {
                "batch_size": None,
                "max_attempts": 3,
                "retry_delay": 1.0,
                "backoff_factor": 2.0,
                "request_timeout": 5.0
            },
            "app": {
                "host": "127.0.0.1",
                "port": 22582,
                "debug": False
            }
        }

    def _merge_config(self, file_config: Dict[str, Any]) -> None:
        """Merge file configuration with current config."""
        for section, values in file_config.items():
            if section in self._config:
                if isinstance(values, dict):
                    self._config[section].update(values)
                else:
                    self._config[section] = values
            else:
                self._config[section] = values

    def _override_with_env(self) -> None:
        """Override configuration with environment variables."""
        # Tracker settings
        if os.getenv("SURFSIDE_NAMESPACE"):
            self._config["tracker"]["namespace"] = os.getenv("SURFSIDE_NAMESPACE")

        if os.getenv("SURFSIDE_ENVIRONMENT"):
            self._config["tracker"]["environment"] = os.getenv("SURFSIDE_ENVIRONMENT").lower()

        if os.getenv("SURFSIDE_ENDPOINT"):
            self._config["tracker"]["endpoint"] = os.getenv("SURFSIDE_ENDPOINT")

        if os.getenv("SURFSIDE_ACCOUNT_ID"):
            self._config["tracker"]["account_id"] = os.getenv("SURFSIDE_ACCOUNT_ID")

        if os.getenv("SURFSIDE_SOURCE_ID"):
            self._config["tracker"]["source_id"] = os.getenv("SURFSIDE_SOURCE_ID")

        if os.getenv("SURFSIDE_APP_ID"):
            self._config["tracker"]["app_id"] = os.getenv("SURFSIDE_APP_ID")

        # Emitter settings
        if os.getenv("EMITTER_BATCH_SIZE"):
            batch_size = int(os.getenv("EMITTER_BATCH_SIZE"))
            # 0 means "send everything pending"
            self._config["emitter"]["batch_size"] = batch_size or None

        if os.getenv("EMITTER_MAX_ATTEMPTS"):
            self._config["emitter"]["max_attempts"] = int(os.getenv("EMITTER_MAX_ATTEMPTS"))

        if os.getenv("EMITTER_RETRY_DELAY"):
            self._config["emitter"]["retry_delay"] = float(os.getenv("EMITTER_RETRY_DELAY"))

        if os.getenv("EMITTER_REQUEST_TIMEOUT"):
            self._config["emitter"]["request_timeout"] = float(os.getenv("EMITTER_REQUEST_TIMEOUT"))

        # App settings
        if os.getenv("APP_HOST"):
            self._config["app"]["host"] = os.getenv("APP_HOST")

        if os.getenv("APP_PORT"):
            self._config["app"]["port"] = int(os.getenv("APP_PORT"))

        if os.getenv("APP_DEBUG"):
            self._config["app"]["debug"] = os.getenv("APP_DEBUG").lower() == "true"

    def get_tracker_config(self) -> TrackerConfig:
        """Get tracker configuration."""
        tracker_config = self._config["tracker"]
        return TrackerConfig(
            namespace=tracker_config["namespace"],
            environment=tracker_config["environment"],
            endpoint=tracker_config["endpoint"],
            account_id=tracker_config["account_id"],
            source_id=tracker_config["source_id"],
            app_id=tracker_config["app_id"],
            platform=tracker_config["platform"]
        )

    def get_emitter_config(self) -> EmitterConfig:
        """Get emitter configuration."""
        emitter_config = self._config["emitter"]
        return EmitterConfig(
            batch_size=emitter_config["batch_size"],
            max_attempts=emitter_config["max_attempts"],
            retry_delay=emitter_config["retry_delay"],
            backoff_factor=emitter_config["backoff_factor"],
            request_timeout=emitter_config["request_timeout"]
        )

    def get_app_config(self) -> AppConfig:
        """Get application configuration."""
        app_config = self._config["app"]
        return AppConfig(
            host=app_config["host"],
            port=app_config["port"],
            debug=app_config["debug"]
        )

    def get_config(self) -> Dict[str, Any]:
        """Get raw configuration dictionary."""
        return self._config.copy()

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()

    def save_config(self) -> None:
        """Save current configuration to file."""
        with open(self.config_file, 'w', encoding='utf-8') as f:
            json.dump(self._config, f, indent=2, ensure_ascii=False)


# Global configuration instance
config_manager = ConfigManager()


def get_tracker_config() -> TrackerConfig:
    """Get tracker configuration."""
    return config_manager.get_tracker_config()


def get_emitter_config() -> EmitterConfig:
    """Get emitter configuration."""
    return config_manager.get_emitter_config()


def get_app_config() -> AppConfig:
    """Get application configuration."""
    return config_manager.get_app_config()


def reload_config() -> None:
    """Reload configuration."""
    config_manager.reload()


def save_config() -> None:
    """Save configuration to file."""
    config_manager.save_config()
