"""Configuration helpers for the wardrobe planner."""

from dataclasses import dataclass
from pathlib import Path
import os
from typing import Optional

DEFAULT_DATABASE_PATH = "data/wardrobe.db"
DEFAULT_PLAN_NAME_PREFIX = "AI Week Plan"


@dataclass
class PlannerConfig:
    """Configuration values for the planner app.

    Values come from environment variables first and fall back to an optional
    environment specific YAML file so that secrets such as the weather API key
    can be injected by the runtime.
    """

    database_path: str = DEFAULT_DATABASE_PATH
    weather_api_key: Optional[str] = None
    default_location: Optional[str] = None
    default_latitude: Optional[float] = None
    lookback_days: int = 14
    mix_strategy: str = "balanced"
    existing_policy: str = "skip"
    plan_name_prefix: str = DEFAULT_PLAN_NAME_PREFIX
    environment: str | None = None

    @classmethod
    def from_env(cls) -> "PlannerConfig":
        """Build a config from environment variables or an environment YAML file.

        Environment specific YAML lives in ``config/environments/<env>.yaml`` by
        default and is merged underneath environment variables.
        """

        env_name = os.getenv("APP_ENV")
        config_path = os.getenv("APP_CONFIG_PATH")
        config_dir = Path(os.getenv("PLANNER_CONFIG_DIR", "config/environments"))
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

        latitude = get_value("default_latitude")
        lookback = get_value("lookback_days", "14")

        return cls(
            database_path=str(get_value("database_path", DEFAULT_DATABASE_PATH) or DEFAULT_DATABASE_PATH),
            weather_api_key=get_value("openweather_api_key"),
            default_location=get_value("default_location"),
            default_latitude=float(latitude) if latitude not in (None, "") else None,
            lookback_days=int(lookback or 14),
            mix_strategy=str(get_value("mix_strategy", "balanced") or "balanced"),
            existing_policy=str(get_value("existing_policy", "skip") or "skip"),
            plan_name_prefix=str(get_value("plan_name_prefix", DEFAULT_PLAN_NAME_PREFIX) or DEFAULT_PLAN_NAME_PREFIX),
            environment=env_name,
        )

    @staticmethod
    def _load_yaml_config(path: Path) -> dict:
        """Parse a minimal ``key: value`` YAML file without external dependencies."""

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
