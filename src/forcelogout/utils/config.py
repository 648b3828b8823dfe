"""Configuration utilities for forcelogout."""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Union

import yaml

from ..exceptions import ConfigurationError

CONFIG_DIR = Path.home() / ".forcelogout"
CONFIG_FILE_YAML = CONFIG_DIR / "config.yaml"

DEFAULT_PROVIDER_CONFIG = {
    "type": "firebase",
    "credentials_file": "service.json",
    "user_pool_id": None,
    "region": "us-east-1",
}

DEFAULT_LOGOUT_CONFIG = {
    "page_size": 1000,
    "hard_concurrency": 5,  # updateUser/disable quota is the strictest
    "soft_concurrency": 10,
    "max_attempts": 3,
    "base_delay": 0.5,
    "soft_pacing_delay": 0.1,
    "errors_file": "logout_errors.json",
}

DEFAULT_SERVER_CONFIG = {
    "logout_enabled": False,
    "api_secret": None,
    "host": "0.0.0.0",
    "port": 3000,
}

DEFAULT_LOGGING_CONFIG = {
    "level": "INFO",
    "format": "detailed",
}

EXCLUSION_FILE_KEYS = ("excluded_user_ids", "excludedUserIds")

TRUE_VALUES = ("true", "1", "yes", "on")
FALSE_VALUES = ("false", "0", "no", "off", "")


def parse_bool(value: Any, name: str) -> bool:
    """Interpret a boolean setting from YAML or the environment.

    Args:
        value: A bool, or a string such as "true", "off" or "1"
        name: Setting name used in the error message

    Returns:
        The boolean value

    Raises:
        ConfigurationError: If the value is neither a bool nor a recognised string
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in TRUE_VALUES:
            return True
        if normalized in FALSE_VALUES:
            return False
    raise ConfigurationError(f"Invalid boolean value for {name}: {value!r}")


@dataclass(frozen=True)
class ProviderConfig:
    type: str = "firebase"
    credentials_file: Optional[str] = "service.json"
    user_pool_id: Optional[str] = None
    region: str = "us-east-1"


@dataclass(frozen=True)
class LogoutSettings:
    page_size: int = 1000
    hard_concurrency: int = 5
    soft_concurrency: int = 10
    max_attempts: int = 3
    base_delay: float = 0.5
    soft_pacing_delay: float = 0.1
    errors_file: str = "logout_errors.json"


@dataclass(frozen=True)
class ServerConfig:
    """Safety gating and bind address for the HTTP endpoint.

    The logout endpoint stays locked unless ``logout_enabled`` is true, and
    every request must present ``api_secret``.
    """

    logout_enabled: bool = False
    api_secret: Optional[str] = None
    host: str = "0.0.0.0"
    port: int = 3000


def load_exclusion_file(path: Union[str, Path]) -> List[str]:
    """Read excluded user IDs from a file.

    YAML and JSON files may hold a list of IDs or a mapping with an
    ``excluded_user_ids`` list. Any other file is read as one ID per line,
    ignoring blank lines and ``#`` comments.

    Args:
        path: File to read

    Returns:
        List of user IDs

    Raises:
        ConfigurationError: If the file is missing or malformed
    """
    path = Path(path).expanduser()
    if not path.exists():
        raise ConfigurationError(f"Exclusion file not found: {path}")

    text = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()

    if suffix in (".yaml", ".yml", ".json"):
        try:
            data = json.loads(text) if suffix == ".json" else yaml.safe_load(text)
        except (ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Exclusion file {path} is not valid: {e}") from e

        if isinstance(data, dict):
            keys = [key for key in EXCLUSION_FILE_KEYS if key in data]
            if not keys:
                raise ConfigurationError(
                    f"Exclusion file {path} must contain an 'excluded_user_ids' list"
                )
            data = data[keys[0]]
        if data is None:
            return []
        if not isinstance(data, list):
            raise ConfigurationError(f"Exclusion file {path} must contain a list of user IDs")
        return [str(item).strip() for item in data if str(item).strip()]

    ids = []
    for line in text.splitlines():
        line = line.split("#", 1)[0].strip()
        if line:
            ids.append(line)
    return ids


class Config:
    """Manages forcelogout configuration from YAML with environment overrides."""

    def __init__(self, config_file: Optional[Union[str, Path]] = None):
        """Initialize the configuration manager.

        Args:
            config_file: YAML file to read (defaults to ~/.forcelogout/config.yaml,
                or FORCELOGOUT_CONFIG when set)
        """
        env_file = os.environ.get("FORCELOGOUT_CONFIG")
        self.config_file = Path(config_file or env_file or CONFIG_FILE_YAML).expanduser()
        self.config_data: Dict[str, Any] = {}
        self._config_loaded = False

    def _ensure_config_loaded(self):
        """Ensure configuration is loaded from file."""
        if not self._config_loaded:
            self._load_config()
            self._config_loaded = True

    def _load_config(self):
        if not self.config_file.exists():
            self.config_data = {}
            return

        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Configuration file {self.config_file} is not valid YAML: {e}"
            ) from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file {self.config_file} must be a mapping")
        self.config_data = data

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value with dot notation support.

        Args:
            key: Configuration key (supports dot notation like "server.port")
            default: Default value if key doesn't exist

        Returns:
            Configuration value
        """
        self._ensure_config_loaded()

        value: Any = self.config_data
        for k in key.split("."):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def get_all(self) -> Dict[str, Any]:
        self._ensure_config_loaded()
        return self.config_data.copy()

    def _section(self, name: str, defaults: Dict[str, Any]) -> Dict[str, Any]:
        section = self.get(name, {}) or {}
        if not isinstance(section, dict):
            raise ConfigurationError(f"Configuration section '{name}' must be a mapping")
        merged = defaults.copy()
        merged.update(section)
        return merged

    def get_provider_config(self) -> ProviderConfig:
        """Get identity provider configuration with environment variable overrides."""
        section = self._section("provider", DEFAULT_PROVIDER_CONFIG)
        provider_type = os.environ.get("FORCELOGOUT_PROVIDER", section["type"]).lower()
        if provider_type not in ("firebase", "cognito"):
            raise ConfigurationError(
                f"Unsupported provider type '{provider_type}'. Expected 'firebase' or 'cognito'."
            )

        return ProviderConfig(
            type=provider_type,
            credentials_file=os.environ.get(
                "GOOGLE_APPLICATION_CREDENTIALS", section["credentials_file"]
            ),
            user_pool_id=os.environ.get("COGNITO_USER_POOL_ID", section["user_pool_id"]),
            region=os.environ.get("AWS_REGION", section["region"]),
        )

    def get_logout_settings(self) -> LogoutSettings:
        """Get bulk logout tunables, validated."""
        section = self._section("logout", DEFAULT_LOGOUT_CONFIG)
        try:
            settings = LogoutSettings(
                page_size=int(section["page_size"]),
                hard_concurrency=int(section["hard_concurrency"]),
                soft_concurrency=int(section["soft_concurrency"]),
                max_attempts=int(section["max_attempts"]),
                base_delay=float(section["base_delay"]),
                soft_pacing_delay=float(section["soft_pacing_delay"]),
                errors_file=str(section["errors_file"]),
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid logout configuration: {e}") from e

        errors = self.validate_logout_settings(settings)
        if errors:
            raise ConfigurationError("; ".join(errors))
        return settings

    def validate_logout_settings(self, settings: LogoutSettings) -> List[str]:
        """
        Validate logout settings.

        Returns:
            List of validation error messages (empty when valid)
        """
        errors = []
        if not 1 <= settings.page_size <= 1000:
            errors.append("logout.page_size must be between 1 and 1000")
        if settings.hard_concurrency < 1:
            errors.append("logout.hard_concurrency must be a positive integer")
        if settings.soft_concurrency < 1:
            errors.append("logout.soft_concurrency must be a positive integer")
        if settings.max_attempts < 1:
            errors.append("logout.max_attempts must be a positive integer")
        if settings.base_delay < 0:
            errors.append("logout.base_delay must not be negative")
        if settings.soft_pacing_delay < 0:
            errors.append("logout.soft_pacing_delay must not be negative")
        return errors

    def get_server_config(self) -> ServerConfig:
        """Get HTTP server configuration with environment variable overrides."""
        section = self._section("server", DEFAULT_SERVER_CONFIG)
        return ServerConfig(
            logout_enabled=self._get_env_bool(
                "LOGOUT_ENABLED", parse_bool(section["logout_enabled"], "server.logout_enabled")
            ),
            api_secret=os.environ.get("API_SECRET", section["api_secret"]) or None,
            host=str(section["host"]),
            port=self._get_env_int("PORT", int(section["port"])),
        )

    def get_logging_config(self) -> Dict[str, Any]:
        section = self._section("logging", DEFAULT_LOGGING_CONFIG)
        section["level"] = os.environ.get("FORCELOGOUT_LOG_LEVEL", section["level"]).upper()
        return section

    def get_excluded_user_ids(
        self,
        extra_ids: Iterable[str] = (),
        extra_files: Iterable[Union[str, Path]] = (),
    ) -> FrozenSet[str]:
        """
        Build the exclusion set for a run.

        Args:
            extra_ids: IDs passed on the command line
            extra_files: Exclusion files passed on the command line

        Returns:
            Immutable set of user IDs that must not be logged out
        """
        section = self._section("exclusions", {"user_ids": [], "file": None})
        user_ids = section.get("user_ids")
        if user_ids is None:
            user_ids = []
        if not isinstance(user_ids, list):
            raise ConfigurationError("exclusions.user_ids must be a list of user IDs")
        ids = [str(uid) for uid in user_ids]
        if section.get("file"):
            ids.extend(load_exclusion_file(section["file"]))
        for path in extra_files:
            ids.extend(load_exclusion_file(path))
        ids.extend(extra_ids)
        return frozenset(uid.strip() for uid in ids if uid and uid.strip())

    def _get_env_bool(self, env_var: str, default: bool) -> bool:
        value = os.environ.get(env_var)
        if value is None:
            return default
        return parse_bool(value, env_var)

    def _get_env_int(self, env_var: str, default: int) -> int:
        value = os.environ.get(env_var)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError as e:
            raise ConfigurationError(f"Invalid integer value for {env_var}: {value}") from e
