import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from idp_infra.stack_config import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"
DEFAULT_CONFIG_NAME = "dev"

REQUIRED_KEYS = ["region", "base"]
REQUIRED_BASE_KEYS = ["id", "cidr", "profile"]
REQUIRED_PET_APP_KEYS = ["id", "repository", "owner", "branch"]


def config_path(name: Optional[str] = None) -> Path:
    """Resolve a settings file from a name, the CONFIG_FILE variable or the default."""
    name = name or os.environ.get("CONFIG_FILE") or DEFAULT_CONFIG_NAME
    candidate = Path(name)
    if candidate.suffix in (".yml", ".yaml"):
        return candidate
    return CONFIG_DIR / f"{name}.yml"


def _require(section: Dict[str, Any], keys, where: str) -> None:
    name = where.rstrip(".") or "settings"
    if not isinstance(section, dict):
        raise ConfigurationError(f"{name} must be a mapping", field=name)
    for key in keys:
        if section.get(key) in (None, ""):
            raise ConfigurationError(f"Missing required configuration key: {where}{key}", field=key)


def load_settings(path) -> Dict[str, Any]:
    """Load and validate YAML settings from ``path``."""
    path = Path(path)
    if not path.is_file():
        raise ConfigurationError(f"Settings file not found: {path}")
    with open(path, "r") as file:
        settings = yaml.safe_load(file) or {}
    if not isinstance(settings, dict):
        raise ConfigurationError(f"Settings file {path} must contain a mapping")

    _require(settings, REQUIRED_KEYS, "")
    _require(settings["base"], REQUIRED_BASE_KEYS, "base.")
    pet_apps = settings.setdefault("pet_apps", []) or []
    if not isinstance(pet_apps, list):
        raise ConfigurationError("pet_apps must be a list", field="pet_apps")
    for index, pet_app in enumerate(pet_apps):
        _require(pet_app, REQUIRED_PET_APP_KEYS, f"pet_apps[{index}].")

    region = settings["region"]
    settings["base"].setdefault("availability_zones", [f"{region}{zone}" for zone in "abc"])
    settings["pet_apps"] = pet_apps

    logger.info("Loaded settings from %s (%d application stack(s))", path, len(pet_apps))
    return settings
