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
End-to-End tests for the `cogmeta read` command.

These tests verify the complete workflow from CLI invocation to report output.
"""

import json
import subprocess
import sys
from pathlib import Path

import pytest

from tests.fixtures.mock_cog_factory import SHORT, MockCogBuilder, MockEntry, build_sample_cog

PROJECT_ROOT = Path(__file__).resolve().parents[2]


def run_cogmeta(*args):
    return subprocess.run(
        [sys.executable, '-m', 'cogmeta.main', 'read', *args],
        capture_output=True, text=True, cwd=PROJECT_ROOT
    )


@pytest.mark.e2e
class TestReadCommand:
    """Test the `cogmeta read` command end-to-end."""

    def test_markdown_to_stdout(self, tmp_path):
        """Test reading a COG and printing the Markdown report."""
        # Arrange: Write the test COG
        test_file = tmp_path / "sample.tif"
        test_file.write_bytes(build_sample_cog().to_bytes())

        # Act
        result = run_cogmeta('-i', str(test_file))

        # Assert
        assert result.returncode == 0, f"Command failed: {result.stderr}"
        assert '# COG Metadata Report' in result.stdout
        assert '| 2 | Mask | 1024 x 768 |' in result.stdout
        assert 'Parsed 3 IFD(s)' in result.stderr

    def test_json_to_file(self, tmp_path):
        """Test writing the JSON report to a file."""
        test_file = tmp_path / "sample.tif"
        test_file.write_bytes(build_sample_cog('MM').to_bytes())
        report_file = tmp_path / "reports" / "sample.json"
        report_file.parent.mkdir()

        result = run_cogmeta('-i', str(test_file), '-f', 'json', '-o', str(report_file))

        assert result.returncode == 0, f"Command failed: {result.stderr}"
        content = json.loads(report_file.read_text(encoding='utf-8'))
        assert content['byte_order'] == 'BIG_ENDIAN'
        assert len(content['ifds']) == 3

    def test_verbose_log_file(self, tmp_path):
        """Test that verbose runs log every fetch to the log file."""
        test_file = tmp_path / "sample.tif"
        test_file.write_bytes(build_sample_cog().to_bytes())
        log_file = tmp_path / "logs" / "read.log"

        result = run_cogmeta('-i', str(test_file), '-t', 'false', '--initial-fetch-size', '32', '-v',
                             '--log-file', str(log_file))

        assert result.returncode == 0, f"Command failed: {result.stderr}"
        assert '### IFD 0 Tags' not in result.stdout
        assert 'Cache miss: fetching 32 bytes at offset 0' in log_file.read_text(encoding='utf-8')

    def test_invalid_tiff_fails(self, tmp_path):
        """Test that a BigTIFF header exits with status 1."""
        test_file = tmp_path / "big.tif"
        test_file.write_bytes(MockCogBuilder(magic=43).add_ifd([MockEntry(256, SHORT, (1,))]).to_bytes())

        result = run_cogmeta('-i', str(test_file))

        assert result.returncode == 1
        assert 'BigTIFF is not supported' in result.stderr

    def test_cycle_fails(self, tmp_path):
        test_file = tmp_path / "cycle.tif"
        test_file.write_bytes(MockCogBuilder().add_ifd([MockEntry(256, SHORT, (1,))], next_offset=8).to_bytes())

        result = run_cogmeta('-i', str(test_file))

        assert result.returncode == 1
        assert 'cycle' in result.stderr

    def test_missing_file_fails(self, tmp_path):
        result = run_cogmeta('-i', str(tmp_path / "missing.tif"))
        assert result.returncode == 1
        assert "File not found" in result.stderr

    def test_invalid_option_rejected(self, tmp_path):
        result = run_cogmeta('-i', 'x.tif', '--max-ifds', '0')
        assert result.returncode == 2
