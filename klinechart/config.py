"""Server configuration loaded from YAML and the environment."""

import os
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when a configuration file cannot be used."""


@dataclass
class ServerConfig:
    """Configuration of the caching price proxy."""
    host: str = '0.0.0.0'
    port: int = 3000
    cache_ttl: int = 300  # seconds
    cache_check_period: int = 320  # seconds
    upstream_url: str = 'https://api.binance.com'
    request_timeout: float = 10.0
    static_dir: Optional[str] = 'public'
    log_level: str = 'INFO'
    log_file: Optional[str] = None
    default_symbol: str = 'BTCUSDT'
    default_interval: str = '1d'
    default_limit: int = 168

    def __post_init__(self):
        if self.port <= 0:
            raise ConfigError(f"port must be positive, got {self.port}")
        if self.cache_ttl <= 0:
            raise ConfigError(f"cache_ttl must be positive, got {self.cache_ttl}")
        if self.default_limit <= 0:
            raise ConfigError(f"default_limit must be positive, got {self.default_limit}")


def _coerce(name: str, value: Any, default: Any) -> Any:
    """Convert environment strings to the type of the field default."""
    if value is None or not isinstance(value, str) or isinstance(default, str) or default is None:
        return value
    try:
        return type(default)(value)
    except ValueError:
        raise ConfigError(f"Invalid value for '{name}': {value!r}")


def load_config(
    config_path: Optional[Union[str, Path]] = None,
    env: Optional[Mapping[str, str]] = None
) -> ServerConfig:
    """Build a ServerConfig from an optional YAML file and the environment.

    Args:
        config_path: Path to a YAML file with ServerConfig keys
        env: Environment mapping (``os.environ`` by default). ``PORT`` and
            ``LOG_LEVEL`` override the file.

    Returns:
        ServerConfig: Resolved configuration

    Raises:
        ConfigError: If the file is missing, malformed or has unknown keys
    """
    env = os.environ if env is None else env
    known = {f.name: f.default for f in fields(ServerConfig)}
    values: Dict[str, Any] = {}

    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        with open(path, 'r') as f:
            try:
                loaded = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {path}: {e}")
        if not isinstance(loaded, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        unknown = sorted(set(loaded) - set(known))
        if unknown:
            raise ConfigError(f"Unknown config keys: {unknown}")
        values.update(loaded)

    if env.get('PORT'):
        values['port'] = env['PORT']
    if env.get('LOG_LEVEL'):
        values['log_level'] = env['LOG_LEVEL']

    values = {k: _coerce(k, v, known[k]) for k, v in values.items()}
    config = ServerConfig(**values)
    logger.debug(f"Loaded config: {config}")
    return config
