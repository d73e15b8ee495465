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
Dataclass-based Argument Models for cogmeta Tools.

Validates the command-line arguments of the `read` tool in `__post_init__`
so the tool body receives clean inputs.

Classes:
    BaseArguments: A base dataclass for common script arguments.
    ReadArguments: Arguments for the read_metadata tool.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

REPORT_FORMATS = ('md', 'json')


@dataclass
class BaseArguments:
    """A base dataclass for common script arguments."""
    output_path: Optional[Path] = None
    log_file: Optional[Path] = None
    verbose: bool = False

    def __post_init__(self):
        """Coerce path-like arguments to Path objects."""
        if self.output_path and isinstance(self.output_path, str):
            self.output_path = Path(self.output_path)
        if self.log_file and isinstance(self.log_file, str):
            self.log_file = Path(self.log_file)

    def handle_error(self, message: str):
        """Logs an error and raises ValueError."""
        logger.error(message)
        raise ValueError(message)


@dataclass
class ReadArguments(BaseArguments):
    """Arguments for the read_metadata tool."""
    input: str = ''
    report_format: str = 'md'
    include_tags: bool = True
    max_ifds: Optional[int] = None
    initial_fetch_size: Optional[int] = None

    def __post_init__(self):
        """Validation for read_metadata arguments."""
        super().__post_init__()
        try:
            self._validate_read()
        except ValueError as e:
            self.handle_error(str(e))

    def _validate_read(self):
        """Perform validation checks for read_metadata arguments."""
        if not self.input:
            raise ValueError("An input URL or path is required.")
        if self.report_format not in REPORT_FORMATS:
            raise ValueError(f"Report format must be one of {REPORT_FORMATS}, got '{self.report_format}'")
        if self.max_ifds is not None and self.max_ifds < 1:
            raise ValueError(f"max_ifds must be at least 1, got {self.max_ifds}")
        if self.initial_fetch_size is not None and self.initial_fetch_size < 1:
            raise ValueError(f"initial_fetch_size must be positive, got {self.initial_fetch_size}")
