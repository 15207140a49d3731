"""Service settings read from environment variables."""
import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional


def _parse_int(env: Mapping[str, str], name: str, default: str) -> int:
    value = env.get(name, default)
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


@dataclass
class Settings:
    """Runtime configuration for the events service."""
    github_repository: str
    github_asset_name: str
    github_api_base: str = "https://api.github.com"
    timeout_seconds: int = 30
    refresh_interval_seconds: int = 3600
    log_level: str = "INFO"
    api_host: str = "0.0.0.0"
    api_port: int = 8080
    cors_allowed_origins: List[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> 'Settings':
        """
        Build settings from the environment.

        Args:
            env: Mapping to read from (default: os.environ)

        Returns:
            Settings instance

        Raises:
            ValueError: Required variable missing or numeric value invalid
        """
        if env is None:
            env = os.environ

        repository = env.get('GITHUB_REPOSITORY', '').strip()
        asset_name = env.get('GITHUB_ASSET_NAME', '').strip()

        missing = [
            name for name, value in (
                ('GITHUB_REPOSITORY', repository),
                ('GITHUB_ASSET_NAME', asset_name)
            )
            if not value
        ]
        if missing:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing)}"
            )

        origins = [
            origin.strip()
            for origin in env.get('CORS_ALLOWED_ORIGINS', '*').split(',')
            if origin.strip()
        ]

        return cls(
            github_repository=repository,
            github_asset_name=asset_name,
            github_api_base=env.get('GITHUB_API_BASE', 'https://api.github.com'),
            timeout_seconds=_parse_int(env, 'TIMEOUT_SECONDS', '30'),
            refresh_interval_seconds=_parse_int(env, 'REFRESH_INTERVAL_SECONDS', '3600'),
            log_level=env.get('LOG_LEVEL', 'INFO'),
            api_host=env.get('API_HOST', '0.0.0.0'),
            api_port=_parse_int(env, 'API_PORT', '8080'),
            cors_allowed_origins=origins or ["*"]
        )
