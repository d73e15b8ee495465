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
Pytest configuration and shared fixtures for the cogmeta test suite.

This module provides:
- Pytest configuration (assertion output for long byte buffers)
- Shared fixtures for synthetic COG files
- Range source fixtures

Example:
    >>> async def test_using_fixture(sample_cog_bytes):
    ...     document = await parse(BytesRangeSource(sample_cog_bytes))
    ...     assert len(document.ifds) == 3
"""

import pytest

# pythonpath is configured in pyproject.toml to include project root
from tests.fixtures.mock_cog_factory import RecordingRangeSource, build_sample_cog


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_assertrepr_compare(op, left, right):
    """
    Custom assertion representation to keep long byte buffers out of the logs.

    Args:
        op: Comparison operator ('==', '!=', 'in', etc.)
        left: Left operand of comparison
        right: Right operand of comparison

    Returns:
        List of strings for assertion message, or None for default behavior
    """
    MAX_BYTES_LENGTH = 64

    if isinstance(left, bytes) and isinstance(right, bytes):
        if len(left) > MAX_BYTES_LENGTH or len(right) > MAX_BYTES_LENGTH:
            mismatch = next((i for i, (a, b) in enumerate(zip(left, right)) if a != b), min(len(left), len(right)))
            return [
                "Comparing byte buffers:",
                f"  left: {len(left)} bytes, right: {len(right)} bytes",
                f"  first difference at index {mismatch}",
            ]
    return None


# =============================================================================
# Synthetic COG Fixtures
# =============================================================================

@pytest.fixture
def sample_cog_bytes():
    """
    Bytes of a little-endian three-IFD COG.

    Returns:
        bytes: The file contents
    """
    return build_sample_cog('II').to_bytes()


@pytest.fixture
def sample_cog_file(tmp_path, sample_cog_bytes):
    """
    The sample COG written to a temporary file.

    Returns:
        Path: Path to the file
    """
    path = tmp_path / "sample_cog.tif"
    path.write_bytes(sample_cog_bytes)
    return path


@pytest.fixture
def recording_source(sample_cog_bytes):
    """
    A RecordingRangeSource over the sample COG.

    Returns:
        RecordingRangeSource: The source
    """
    return RecordingRangeSource(sample_cog_bytes)


@pytest.fixture
def pattern_bytes():
    """
    4096 bytes where every byte equals its offset modulo 251.

    Returns:
        bytes: The buffer
    """
    return bytes(i % 251 for i in range(4096))
