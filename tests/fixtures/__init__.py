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
Test fixtures and mock data factories for cogmeta tests.

This package contains:
- MockCogBuilder: Factory for writing synthetic TIFF files byte by byte
- RecordingRangeSource: In-memory range source that records every fetch
"""

from tests.fixtures.mock_cog_factory import MockCogBuilder, MockEntry, RecordingRangeSource

__all__ = ['MockCogBuilder', 'MockEntry', 'RecordingRangeSource']
