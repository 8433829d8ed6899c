from constants import *
import copy
import yaml
import os

import logging

# Retrieve main logger
logger = logging.getLogger("main")


# Cache variable
_cached_settings = None


def _apply_env_overrides(settings):
    """Environment variables win over the YAML file"""
    if os.environ.get("BUSINESS_SHEET_URL"):
        settings["catalog"]["business_sheet_url"] = os.environ["BUSINESS_SHEET_URL"]
    if os.environ.get("REDIS_URL"):
        settings["storage"]["redis_url"] = os.environ["REDIS_URL"]
    if os.environ.get("STOREFRONT_STORAGE"):
        settings["storage"]["backend"] = os.environ["STOREFRONT_STORAGE"]
    return settings


def load_settings(force=False, config_file=None):
    global _cached_settings

    if _cached_settings and not force:
        return _cached_settings

    config_file = config_file or CONFIG_FILE
    merged_settings = copy.deepcopy(DEFAULT_SETTINGS)

    if os.path.exists(config_file):
        logger.debug(f"Reading configuration file: {config_file}")
        with open(config_file, "r") as yaml_file:
            settings = yaml.safe_load(yaml_file) or {}

        # Deep merge with defaults to ensure new keys are present
        for section, values in settings.items():
            if isinstance(values, dict) and section in merged_settings and isinstance(merged_settings[section], dict):
                merged_settings[section].update(values)
            else:
                merged_settings[section] = values
    else:
        try:
            os.makedirs(os.path.dirname(config_file), exist_ok=True)
            with open(config_file, "w") as yaml_file:
                yaml.dump(merged_settings, yaml_file)
        except OSError as e:
            logger.warning(f"Could not write default configuration to {config_file}: {e}")

    _cached_settings = _apply_env_overrides(merged_settings)
    return _cached_settings


def reload_conf():
    """Reload application settings cache"""
    global _cached_settings
    _cached_settings = None
    return load_settings(force=True)
