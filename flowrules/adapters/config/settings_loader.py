import os

import yaml

from flowrules.core.domain.settings import EngineSettings

# env var -> settings field
_ENV_OVERRIDES = {
    "FLOWRULES_RULES_FILE": "rules_file",
    "FLOWRULES_DEFAULT_AGGREGATION": "default_aggregation",
    "FLOWRULES_LOG_LEVEL": "log_level",
}


def load_settings(path: str | None = None) -> EngineSettings:
    """
    Load engine settings from a YAML file.
    Environment variables override values from the file.

    Args:
        path: Path to config.yaml. Defaults to FLOWRULES_CONFIG_FILE env var or "config.yaml".
    """
    if path is None:
        path = os.getenv("FLOWRULES_CONFIG_FILE", "config.yaml")

    config_data = {}

    if os.path.exists(path):
        try:
            with open(path, "r") as f:
                config_data = yaml.safe_load(f) or {}
        except Exception as e:
            raise RuntimeError(f"Failed to load configuration from {path}: {e}")
        if not isinstance(config_data, dict):
            raise RuntimeError(f"Failed to load configuration from {path}: expected a mapping")

    # Env vars > File > Defaults
    for env_name, field_name in _ENV_OVERRIDES.items():
        if os.getenv(env_name):
            config_data[field_name] = os.getenv(env_name)

    if isinstance(config_data.get("log_level"), str):
        config_data["log_level"] = config_data["log_level"].upper()

    return EngineSettings(**config_data)
