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
COG Metadata Reader Test Suite.

This package contains tests for cogmeta components including:
- Unit tests for the codec, range sources, reader, decoder and parser
- Integration tests against TIFF files written by tifffile
- End-to-end tests for the `cogmeta read` command
"""
