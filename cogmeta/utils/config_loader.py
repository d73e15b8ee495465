#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# ******************************************************************************
# Project: COG Metadata Reader (cogmeta)
# Author: Eric Robeck <robeckgeo@gmail.com>
#
# Copyright (c) 2025, Eric Robeck
# Licensed under the MIT License
# ******************************************************************************

"""
Configuration Management for the COG Metadata Reader.

This module provides a singleton configuration manager (`Config`) that loads,
parses, and provides access to settings from the package `config.toml` file.
It holds the range reader fetch policy, the IFD chain limits and the HTTP
client settings.

Classes:
    Config: A singleton class for managing application-wide configuration.
"""
import logging
import sys
from pathlib import Path
from typing import Any, Dict


if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

logger = logging.getLogger(__name__)

CONFIG_PATH = Path(__file__).parent.parent / "config.toml"


class Config:
    """Singleton configuration manager"""
    _instance = None
    _config: Dict[str, Any] = {}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._load_config()
        return cls._instance

    def _load_config(self):
        """Load configuration from config.toml"""
        if CONFIG_PATH.exists():
            try:
                with open(CONFIG_PATH, "rb") as f:
                    self._config = tomllib.load(f)
            except (OSError, tomllib.TOMLDecodeError) as e:
                logger.warning(f"Could not load {CONFIG_PATH}: {e}")
                self._config = self._default_config()
        else:
            self._config = self._default_config()

    def _default_config(self) -> Dict[str, Any]:
        """Default configuration if config.toml doesn't exist"""
        return {
            "reader": {
                "initial_fetch_size": 4096,
                "growth_factor": 2,
                "max_fetch_size": 4 * 1024 * 1024,
            },
            "parser": {
                "max_ifds": 1024,
                "max_value_size": 64 * 1024 * 1024,
            },
            "http": {
                "timeout_seconds": 30.0,
                "user_agent": "cogmeta",
            },
            "logging": {
                "level": "INFO",
                "file": "",
            }
        }

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation

        Args:
            key: Configuration key in dot notation (e.g., "reader.initial_fetch_size")
            default: Default value if key is not found

        Returns:
            Configuration value or default

        Example:
            >>> config.get("reader.growth_factor")
            2
        """
        keys = key.split(".")
        value = self._config
        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def get_section(self, section: str) -> Dict[str, Any]:
        """Get entire configuration section

        Args:
            section: Section name (e.g., "reader", "parser", "http")

        Returns:
            Dictionary containing the section configuration
        """
        return self._config.get(section, {})

    def set(self, key: str, value: Any):
        """Set configuration value using dot notation

        Note:
            This only modifies the in-memory configuration.
            Changes are not persisted to config.toml.
        """
        keys = key.split(".")
        section = self._config
        for k in keys[:-1]:
            if k not in section:
                section[k] = {}
            section = section[k]
        section[keys[-1]] = value

    def reload(self):
        """Reload configuration from config.toml"""
        self._load_config()

# Singleton instance
config = Config()
