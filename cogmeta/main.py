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
Command-line interface for the COG Metadata Reader.

This script provides the main entry point for the `cogmeta` command,
parsing user arguments and dispatching them to the appropriate tool.
"""
import argparse
import logging
import sys
from pathlib import Path
from cogmeta.utils.config_loader import config
from cogmeta.utils.log_helpers import setup_logger, shutdown_logger
from cogmeta.utils.script_arguments import ReadArguments

def str2bool(v):
    if isinstance(v, bool):
        return v
    if v.lower() in ('yes', 'true', 't', 'y', '1'):
        return True
    elif v.lower() in ('no', 'false', 'f', 'n', '0'):
        return False
    else:
        raise argparse.ArgumentTypeError('Boolean value expected.')

def positive_int(value: str) -> int:
    """Validate that the value is a positive integer."""
    try:
        ivalue = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected a positive integer, got '{value}'")
    if ivalue < 1:
        raise argparse.ArgumentTypeError(f"Expected a positive integer, got '{ivalue}'")
    return ivalue

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='cogmeta',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    subparsers = parser.add_subparsers(dest='tool', help='Available tools')
    subparsers.required = True

    # --- Read Metadata Tool ---
    read_parser = subparsers.add_parser(
        'read',
        help='Read the header and IFD metadata of a COG through HTTP range requests.',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    read_parser.add_argument('-i', '--input', required=True, type=str, dest='input', help='URL or local path of the COG.')
    read_parser.add_argument('-o', '--output', type=Path, dest='output_path', help='Report file (default: stdout).')
    read_parser.add_argument('-f', '--report-format', type=str.lower, default='md', choices=['md', 'json'], dest='report_format', help='Format of the report.')
    read_parser.add_argument('-t', '--tags', type=str2bool, default=True, dest='include_tags', help='Include the tag table of every IFD in Markdown reports.')
    read_parser.add_argument('--max-ifds', type=positive_int, default=None, dest='max_ifds', help='Longest IFD chain to follow (default from config).')
    read_parser.add_argument('--initial-fetch-size', type=positive_int, default=None, dest='initial_fetch_size', help='Size of the first range request in bytes (default from config).')
    read_parser.add_argument('--log-file', type=Path, dest='log_file', help='Path to a log file for debugging.')
    read_parser.add_argument('-v', '--verbose', action='store_true', dest='verbose', help='Enable verbose logging.')
    return parser

def main(argv=None):
    """
    Main function to parse arguments and call the appropriate tool.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    tool = args.tool
    args_dict = vars(args)
    args_dict.pop('tool', None)

    # --- Logger Setup ---
    if args.verbose:
        log_level = logging.DEBUG
    else:
        log_level = getattr(logging, str(config.get("logging.level", "INFO")).upper(), logging.INFO)
    log_file = args.log_file or config.get("logging.file") or None
    logger = setup_logger(log_file=str(log_file) if log_file else None, level=log_level)

    exit_code = 0
    try:
        if tool == 'read':
            from cogmeta.tools.read_metadata import read_metadata
            script_args = ReadArguments(**args_dict)
            exit_code = read_metadata(script_args)
    except ValueError as e:
        logger.error(f"Invalid arguments: {e}")
        exit_code = 1
    except Exception as e:
        logger.error(f"An unexpected error occurred: {e}", exc_info=True)
        exit_code = 1
    finally:
        shutdown_logger(logger)

    sys.exit(exit_code)

if __name__ == "__main__":
    main()
