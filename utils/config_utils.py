# File: utils/config_utils.py
# Description: Utility functions for loading and validating YAML configuration files.

import os  # Import OS for file existence checks
from typing import Optional

import yaml  # Import PyYAML for reading and parsing YAML files


class ConfigLoaderError(Exception):
    """
    Custom exception for errors encountered during configuration loading or validation.
    """
    pass


def load_config(config_file_path: str, default_config: Optional[dict] = None) -> dict:
    """
    Load the configuration from a YAML file.

    Args:
        config_file_path (str): Path to the YAML configuration file.
        default_config (dict, optional): Default configuration to use if the file is missing.

    Returns:
        dict: Parsed configuration dictionary (empty for an empty file).

    Raises:
        ConfigLoaderError: If the file does not exist (and no default is given),
            fails to parse, or does not contain a mapping.
    """
    if not os.path.exists(config_file_path):
        if default_config is not None:
            return default_config
        raise ConfigLoaderError(f"Config file '{config_file_path}' not found.")

    try:
        with open(config_file_path, "r") as config_file:
            config = yaml.safe_load(config_file)
    except yaml.YAMLError as e:
        raise ConfigLoaderError(f"Error parsing YAML file '{config_file_path}': {e}") from e

    if config is None:
        return {}
    # A list or scalar document cannot be merged with environment settings
    if not isinstance(config, dict):
        raise ConfigLoaderError(
            f"Config file '{config_file_path}' must contain a mapping, got {type(config).__name__}."
        )
    return config


def validate_config(config: dict, required_keys: list) -> None:
    """
    Validate that required keys are present and non-empty in the configuration dictionary.

    Args:
        config (dict): The configuration dictionary to validate.
        required_keys (list): A list of keys that must be present in the configuration.

    Raises:
        ConfigLoaderError: If any required keys are missing.
    """
    missing_keys = [key for key in required_keys if config.get(key) in (None, "")]
    if missing_keys:
        raise ConfigLoaderError(f"Missing required keys in configuration: {missing_keys}")
