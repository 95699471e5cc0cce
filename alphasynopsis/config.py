"""This module is responsible for creating and storing the configuration.

It allows updating the default configuration with one or more other configuration objects.
The order of configs holds significance, with configurations later in the sequence overwriting previous values.
Lists are always overwritten completely.
"""

import logging
import os
from collections import UserDict
from copy import deepcopy

import yaml

from alphasynopsis.constants.keys import ConfigKeys
from alphasynopsis.exceptions import KeyAddedConfigError, TypeMismatchConfigError

logger = logging.getLogger()

DEFAULT = "default"
USER_DEFINED = "user defined"

DEFAULT_CONFIG_PATH = os.path.join(
    os.path.dirname(__file__), "constants", "default.yaml"
)


class Config(UserDict):
    """Dict-like config class that can read from and write to yaml files and allows updating with other config objects."""

    def __init__(self, data: dict = None, name: str = DEFAULT) -> None:
        # super class deliberately not called as this calls "update" (which we overwrite)
        self.data = {**data} if data is not None else {}
        self.name = name

    def from_yaml(self, path: str) -> None:
        with open(path) as f:
            self.data = yaml.safe_load(f)

    def to_yaml(self, path: str) -> None:
        with open(path, "w") as f:
            yaml.dump(self.data, f, sort_keys=False)

    def __setitem__(self, key, item):
        raise NotImplementedError("Use update() to update the config.")

    def __delitem__(self, key):
        raise NotImplementedError("Use update() to update the config.")

    def copy(self):
        raise NotImplementedError("Use deepcopy() to copy the config.")

    def update(self, configs: list["Config"]):
        """
        Updates the config with one or more other config objects.

        The order of configs holds significance, with configurations later in the sequence
        taking precedence in terms of their impact on changes.

        Parameters
        ----------
        configs : list of configs
            List of config objects to update the current config with. The order of the configs is important (last one wins).
        """
        current_config = deepcopy(self.data)
        for config in configs:
            logger.info(f"Updating config with '{config.name}'")
            _update(current_config, config.data, config.name)

        self.data = current_config

    def tool_settings(self, tool_name: str) -> dict:
        """Settings of the `tools` section for one search tool, empty if the tool is not configured."""
        return self.data.get(ConfigKeys.TOOLS, {}).get(tool_name, {})


def load_config(user_configs: list[Config] | None = None) -> Config:
    """Load the packaged default config and apply user defined updates.

    Parameters
    ----------
    user_configs : list of Config, optional
        Configs updating the defaults, applied in order.

    Returns
    -------
    Config
        The resulting config.
    """
    logger.info(f"loading default config from {DEFAULT_CONFIG_PATH}")
    config = Config()
    config.from_yaml(DEFAULT_CONFIG_PATH)
    if user_configs:
        config.update(user_configs)
    return config


def _update(
    target_config: dict,
    update_config: dict,
    config_name: str,
    parent_keys: str = "",
) -> None:
    """
    Recursively update target_dict in-place with values from update_dict, following specific rules for different types.

    Parameters
    ----------
    target_config:
        The config dictionary to be modified
    update_config:
        The config dictionary containing update values
    config_name:
        The name of the current config object
    parent_keys:
        Names of the parent keys, separated by dots. Used only for exception messages.

    Notes
    -----
    - Nested dictionaries are recursively updated
    - Only updates existing keys (adding new keys not allowed)
    - lists are always overwritten

    Raises
    ------
    - KeyAddedConfigError: a key is not found in the target_config
    - TypeMismatchConfigError: the type of the update value does not match the type of the target value
    """
    for key, update_value in update_config.items():
        full_key = f"{parent_keys}.{key}" if parent_keys else key

        if key not in target_config:
            raise KeyAddedConfigError(full_key, update_value, config_name)

        target_value = target_config[key]

        if isinstance(update_value, str):
            if update_value.lower() == "true":
                update_value = True
            elif update_value.lower() == "false":
                update_value = False

        if (
            target_value is not None
            and type(target_value) != type(update_value)
            and not (
                isinstance(target_value, int | float)
                and isinstance(update_value, int | float)
            )
        ):
            raise TypeMismatchConfigError(
                full_key,
                update_value,
                config_name,
                f"{type(update_value)} != {type(target_value)}",
            )

        if isinstance(target_value, dict):
            _update(target_value, update_value, config_name, parent_keys=full_key)
        else:
            # lists and simple values are overwritten
            target_config[key] = update_value
