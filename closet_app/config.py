"""Configuration helpers for the Smart Closet service."""

from dataclasses import dataclass
from pathlib import Path
import os
from typing import Optional

DEFAULT_GEMINI_MODEL = "gemini-1.5-flash"
DEFAULT_PREMIUM_PLAN = "Premium"


@dataclass
class AppConfig:
    """Configuration values for the closet service.

    Storage locations default to a local ``data/`` directory so the service runs
    without any hosted backend. The public image base URL is the prefix under
    which uploaded clothing photos are served back to clients.
    """

    model: str = DEFAULT_GEMINI_MODEL
    api_key: Optional[str] = None
    llm_temperature: float = 0.7
    wardrobe_db_path: str = "data/wardrobe.db"
    image_storage_dir: str = "data/images"
    public_image_base_url: str = "http://localhost:8080/images"
    profile_dir: str = "data/profiles"
    premium_plan: str = DEFAULT_PREMIUM_PLAN
    environment: str | None = None

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Build a config from environment variables or an environment YAML file.

        Environment specific YAML lives in ``config/environments/<env>.yaml`` by
        default and is merged with environment variables so that secrets can be
        injected via the runtime environment.
        """

        env_name = os.getenv("APP_ENV")
        config_path = os.getenv("APP_CONFIG_PATH")
        config_dir = Path(os.getenv("CLOSET_CONFIG_DIR", "config/environments"))
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

        temperature = get_value("llm_temperature")
        try:
            llm_temperature = float(temperature) if temperature is not None else 0.7
        except ValueError:
            llm_temperature = 0.7

        return cls(
            model=str(get_value("model") or DEFAULT_GEMINI_MODEL),
            api_key=get_value("google_api_key"),
            llm_temperature=llm_temperature,
            wardrobe_db_path=str(get_value("wardrobe_db_path") or "data/wardrobe.db"),
            image_storage_dir=str(get_value("image_storage_dir") or "data/images"),
            public_image_base_url=str(
                get_value("public_image_base_url") or "http://localhost:8080/images"
            ),
            profile_dir=str(get_value("profile_dir") or "data/profiles"),
            premium_plan=str(get_value("premium_plan") or DEFAULT_PREMIUM_PLAN),
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
