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
COG Metadata Reading Tool.

This module powers the 'read' command: it parses the header and IFD chain of
a remote or local COG through range requests and writes a Markdown or JSON
report to a file or stdout.
"""

import json
import logging
import sys

from cogmeta.utils.cog_parser import ReaderOptions, parse_cog_sync
from cogmeta.utils.exceptions import CogError
from cogmeta.utils.report_formatters import render_markdown, to_dict
from cogmeta.utils.script_arguments import ReadArguments

logger = logging.getLogger('read_metadata')


def read_metadata(args: ReadArguments) -> int:
    """
    Parse a COG and write its metadata report.

    Args:
        args: Parsed command-line arguments

    Returns:
        0 on success, 1 on failure
    """
    logger.debug(f"Arguments: {args}")

    try:
        document = parse_cog_sync(
            args.input,
            reader_options=ReaderOptions(initial_fetch_size=args.initial_fetch_size),
            max_ifds=args.max_ifds,
        )
    except CogError as e:
        logger.error(f"Failed to read COG metadata from {args.input}: {e}")
        return 1

    if args.report_format == 'json':
        report = json.dumps(to_dict(document), indent=2)
    else:
        report = render_markdown(document, include_tags=args.include_tags)

    if args.output_path:
        try:
            with open(args.output_path, 'w', encoding='utf-8') as f:
                f.write(report)
            logger.info(f"Report written successfully: {args.output_path}")
        except IOError as e:
            logger.error(f"Failed to write report: {e}")
            return 1
    else:
        sys.stdout.write(report)
        if not report.endswith('\n'):
            sys.stdout.write('\n')

    logger.info(
        f"Read {len(document.ifds)} IFD(s) with {document.request_count} request(s) "
        f"({document.bytes_fetched:,} bytes)"
    )
    return 0
