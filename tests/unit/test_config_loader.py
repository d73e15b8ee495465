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
Unit tests for the configuration singleton and the argument models.
"""

import pytest

from cogmeta.utils.config_loader import Config, config
from cogmeta.utils.script_arguments import ReadArguments


@pytest.mark.unit
class TestConfig:
    """Test config.toml loading and dot-notation access."""

    def test_singleton(self):
        assert Config() is config

    def test_packaged_values(self):
        assert config.get("reader.initial_fetch_size") == 4096
        assert config.get("reader.growth_factor") == 2
        assert config.get("reader.max_fetch_size") == 4194304
        assert config.get("parser.max_ifds") == 1024
        assert config.get_section("http")["user_agent"] == "cogmeta"

    def test_missing_key_default(self):
        assert config.get("reader.nothing", 7) == 7
        assert config.get_section("nothing") == {}

    def test_set_then_reload(self):
        config.set("parser.max_ifds", 3)
        try:
            assert config.get("parser.max_ifds") == 3
        finally:
            config.reload()
        assert config.get("parser.max_ifds") == 1024


@pytest.mark.unit
class TestReadArguments:
    """Test validation of the read tool arguments."""

    def test_valid(self):
        args = ReadArguments(input='scene.tif', report_format='json', output_path='out/report.json')
        assert args.output_path.name == 'report.json'

    @pytest.mark.parametrize("kwargs", [
        {"input": ""},
        {"input": "scene.tif", "report_format": "html"},
        {"input": "scene.tif", "max_ifds": 0},
        {"input": "scene.tif", "initial_fetch_size": -1},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            ReadArguments(**kwargs)
