"""Configuration helpers for the Wardrobe Flow app."""

from dataclasses import dataclass
from pathlib import Path
import os
from typing import Optional

DEFAULT_STORAGE_BACKEND = "json"
DEFAULT_BAG_CAPACITY = 30
DEFAULT_BURN_DOWN_DAYS = 14


def _as_int(raw: Optional[str], default: int) -> int:
    try:
        return int(raw) if raw is not None else default
    except (TypeError, ValueError):
        return default


@dataclass
class FlowConfig:
    """Configuration values for the wardrobe engine host.

    Only host concerns live here (where state is stored, how big the hamper
    is, how far the burn-down chart looks ahead); the scoring constants are
    part of the engine itself.
    """

    storage_backend: str = DEFAULT_STORAGE_BACKEND
    storage_path: Optional[str] = None
    bag_capacity: int = DEFAULT_BAG_CAPACITY
    burn_down_days: int = DEFAULT_BURN_DOWN_DAYS
    log_level: str = "INFO"
    environment: str | None = None

    @classmethod
    def from_env(cls) -> "FlowConfig":
        """Build a config from environment variables or an environment YAML file.

        Environment specific YAML lives in ``config/environments/<env>.yaml`` by
        default; environment variables take precedence over file values.
        """

        env_name = os.getenv("APP_ENV")
        config_path = os.getenv("APP_CONFIG_PATH")
        config_dir = Path(os.getenv("FLOW_CONFIG_DIR", "config/environments"))
        yaml_config: dict = {}

        if config_path:
            path = Path(config_path)
        elif env_name:
            path = config_dir / f"{env_name}.yaml"
        else:
            path = None

        if path and path.exists():
            yaml_config = cls._load_yaml_config(path)

        def get_value(key: str, default: Optional[str] = None) -> Optional[str]:
            env_key = key.upper()
            return os.getenv(env_key, yaml_config.get(key, default))

        backend = str(get_value("storage_backend", DEFAULT_STORAGE_BACKEND) or DEFAULT_STORAGE_BACKEND).lower()
        if backend not in {"json", "sqlite"}:
            backend = DEFAULT_STORAGE_BACKEND

        return cls(
            storage_backend=backend,
            storage_path=get_value("storage_path"),
            bag_capacity=max(1, _as_int(get_value("bag_capacity"), DEFAULT_BAG_CAPACITY)),
            burn_down_days=max(0, _as_int(get_value("burn_down_days"), DEFAULT_BURN_DOWN_DAYS)),
            log_level=str(get_value("log_level", "INFO") or "INFO").upper(),
            environment=env_name,
        )

    @staticmethod
    def _load_yaml_config(path: Path) -> dict:
        """Parse a minimal YAML/INI-style config without external dependencies."""

        config: dict[str, str] = {}
        for line in path.read_text().splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            if ":" not in stripped:
                continue
            key, raw_value = stripped.split(":", 1)
            value = raw_value.strip()
            if (value.startswith("\"") and value.endswith("\"")) or (
                value.startswith("'") and value.endswith("'")
            ):
                value = value[1:-1]
            config[key.strip()] = value
        return config
