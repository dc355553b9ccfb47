"""Configuration management for the LLM gateway."""

import os
from typing import Any

import httpx
import yaml
from dotenv import load_dotenv

from llm_gateway.providers import ProviderConfig, ProviderType

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(__file__), "config.yaml")

# Map provider names to environment variable names
PROVIDER_KEY_MAP = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "google": "GEMINI_API_KEY",
    "openrouter": "OPENROUTER_API_KEY",
}


class Configuration:
    """Manages configuration and environment variables for the gateway."""

    def __init__(self, config_path: str | None = None) -> None:
        """Initialize configuration from YAML and environment variables."""
        self.load_env()  # Load .env for API keys
        self._config = self._load_yaml_config(config_path or DEFAULT_CONFIG_PATH)

    @staticmethod
    def load_env() -> None:
        """Load environment variables from .env file."""
        load_dotenv()

    @staticmethod
    def _load_yaml_config(config_path: str) -> dict[str, Any]:
        """Load configuration from YAML file."""
        with open(config_path) as file:
            config = yaml.safe_load(file)
            if not isinstance(config, dict):
                raise ValueError(
                    f"Config file must be YAML dict, got {type(config)}"
                )
            return config

    def get_config_dict(self) -> dict[str, Any]:
        """Get the full configuration dictionary."""
        return self._config

    def api_key_for(self, provider: str) -> str:
        """Get the API key for a provider.

        Args:
            provider: Provider name as used in config.yaml.

        Returns:
            The API key as a string.

        Raises:
            ValueError: If the provider is unknown or its key is not set.
        """
        env_key = PROVIDER_KEY_MAP.get(provider)
        if not env_key:
            raise ValueError(
                f"Unknown provider '{provider}' - no API key mapping found"
            )

        api_key = os.getenv(env_key)
        if not api_key:
            raise ValueError(
                f"API key '{env_key}' not found in environment variables "
                f"for provider '{provider}'"
            )

        return api_key

    def get_provider_settings(self, provider: str) -> dict[str, Any]:
        """Get the YAML settings block of one provider.

        Raises:
            ValueError: If the provider is not configured.
        """
        providers = self._config.get("providers", {})
        if provider not in providers:
            raise ValueError(
                f"Provider '{provider}' not found in providers config"
            )
        return providers[provider] or {}

    def get_provider_config(self, provider: str) -> ProviderConfig:
        """Build a ProviderConfig from YAML settings and the environment."""
        settings = self.get_provider_settings(provider)
        return ProviderConfig(
            provider_type=ProviderType(provider),
            api_key=self.api_key_for(provider),
            base_url=settings.get("base_url"),
        )

    def get_http_client_config(self) -> dict[str, Any]:
        """Get HTTP client timeouts shared by all provider clients.

        Returns:
            HTTP client configuration dictionary with validated values.

        Raises:
            ValueError: If required HTTP client parameters are missing or invalid.
        """
        http_config = self._config.get("http_client", {})

        required_keys = [
            "connect_timeout", "read_timeout", "write_timeout", "pool_timeout"
        ]
        for key in required_keys:
            if key not in http_config:
                raise ValueError(
                    f"http_client.{key} must be explicitly configured in config.yaml"
                )
            if http_config[key] <= 0:
                raise ValueError(f"http_client.{key} must be positive")

        return http_config

    def get_http_timeout(self) -> httpx.Timeout:
        """Build the httpx timeout used by provider clients."""
        http_config = self.get_http_client_config()
        return httpx.Timeout(
            connect=http_config["connect_timeout"],
            read=http_config["read_timeout"],
            write=http_config["write_timeout"],
            pool=http_config["pool_timeout"],
        )

    def get_server_config(self) -> dict[str, Any]:
        """Get HTTP server configuration from YAML.

        Raises:
            ValueError: If host or port are missing or invalid.
        """
        server_config = self._config.get("server", {})
        for key in ("host", "port"):
            if key not in server_config:
                raise ValueError(
                    f"server.{key} must be explicitly configured in config.yaml"
                )

        port = server_config["port"]
        max_port = 65535
        if not isinstance(port, int) or not 0 < port <= max_port:
            raise ValueError(f"server.port must be between 1 and {max_port}")

        return server_config

    def get_logging_config(self) -> dict[str, Any]:
        """Get logging configuration from YAML."""
        return self._config.get("logging", {})
