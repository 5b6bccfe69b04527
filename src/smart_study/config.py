"""Settings loaded from ~/.smart_study/config.yaml and SMART_STUDY_* environment variables."""
import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from smart_study.exceptions import ConfigError

logger = logging.getLogger(__name__)

APP_DIR = Path.home() / ".smart_study"
DEFAULT_DATA_DIR = str(APP_DIR / "data")
DEFAULT_CONFIG_PATH = APP_DIR / "config.yaml"


class Settings(BaseSettings):
    """Application settings. Environment variables win over the YAML file."""
    data_dir: str = Field(default=DEFAULT_DATA_DIR)
    log_level: str = Field(default="WARNING")
    log_file: Optional[str] = Field(default=None)
    seed_demo_data: bool = Field(default=True)
    check_alerts_on_start: bool = Field(default=True)

    model_config = SettingsConfigDict(env_prefix="SMART_STUDY_", extra="ignore")

    @classmethod
    def settings_customise_sources(
        cls, settings_cls, init_settings, env_settings, dotenv_settings, file_secret_settings
    ):
        # YAML values arrive as init kwargs
        return env_settings, init_settings

    @classmethod
    def load_from_yaml(cls, config_path: Optional[Path] = None) -> "Settings":
        """Load the `smart_study:` section of the YAML file and merge with the environment."""
        config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        config_dict: dict = {}
        if config_path.exists():
            with open(config_path, "r", encoding="utf-8") as f:
                yaml_data = yaml.safe_load(f) or {}
            section = yaml_data.get("smart_study", {}) if isinstance(yaml_data, dict) else None
            if isinstance(section, dict):
                config_dict = section
            elif section is not None:
                logger.warning("Ignoring %s: 'smart_study' must be a mapping", config_path)
        return cls(**config_dict)


def load_settings(config_path: Optional[Path] = None) -> Settings:
    try:
        return Settings.load_from_yaml(config_path)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Could not parse {config_path or DEFAULT_CONFIG_PATH}: {e}") from e


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings
