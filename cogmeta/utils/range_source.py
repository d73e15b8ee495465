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
Range Sources.

A range source fetches an arbitrary `[offset, offset + length)` byte range
from one named resource. It is the only external I/O the parser performs, and
every fetch is an await point.

Classes:
    RangeSource: Protocol implemented by every source.
    HttpRangeSource: HTTP Range requests through an httpx.AsyncClient.
    BytesRangeSource: An in-memory resource.
    FileRangeSource: A local file.
"""
import asyncio
import logging
from pathlib import Path
from typing import Optional, Protocol, Union, runtime_checkable

import httpx

from cogmeta.utils.config_loader import config
from cogmeta.utils.exceptions import TransportError

logger = logging.getLogger(__name__)


@runtime_checkable
class RangeSource(Protocol):
    """Protocol for asynchronous byte range sources."""

    name: str
    request_count: int  # running total
    bytes_fetched: int  # running total

    async def fetch(self, offset: int, length: int, min_length: Optional[int] = None) -> bytes:
        """Return `length` bytes starting at absolute `offset`.

        At most `length` bytes are returned. Fewer are accepted only when at
        least `min_length` (default: `length`) bytes arrive, which happens at
        the end of the resource. Anything shorter raises TransportError.
        """
        ...


def _check_request(offset: int, length: int, min_length: Optional[int]) -> int:
    if offset < 0 or length < 0:
        raise ValueError(f"Invalid range: offset={offset}, length={length}")
    if min_length is None:
        return length
    return min(min_length, length)


def _check_length(name: str, data: bytes, offset: int, length: int, required: int) -> bytes:
    """Trim `data` to `length` and raise on a short read."""
    data = data[:length]
    if len(data) < required:
        raise TransportError(
            f"Short read from {name}: requested {required} bytes at offset {offset}, got {len(data)}",
            url=name, offset=offset, length=length
        )
    return data


class HttpRangeSource:
    """
    Fetch byte ranges of a remote resource with HTTP Range requests.

    Each `fetch` issues one GET with `Range: bytes=start-end`. TLS, connection
    pooling and retries are left to the httpx client.

    Args:
        url: URL of the resource.
        client: An existing httpx.AsyncClient. When omitted, one is created and
            closed by `aclose()` (or by using the source as an async context manager).
        timeout: Request timeout in seconds when the client is created here.
    """

    def __init__(self, url: str, client: Optional[httpx.AsyncClient] = None, timeout: Optional[float] = None):
        self.name = url
        self.url = url
        self.request_count = 0
        self.bytes_fetched = 0
        self._owns_client = client is None
        if client is None:
            timeout = timeout if timeout is not None else config.get("http.timeout_seconds", 30.0)
            headers = {"User-Agent": config.get("http.user_agent", "cogmeta")}
            client = httpx.AsyncClient(timeout=httpx.Timeout(timeout), headers=headers, follow_redirects=True)
        self.client = client

    async def __aenter__(self) -> 'HttpRangeSource':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self):
        """Close the httpx client if this source created it."""
        if self._owns_client:
            await self.client.aclose()

    async def fetch(self, offset: int, length: int, min_length: Optional[int] = None) -> bytes:
        required = _check_request(offset, length, min_length)
        if length == 0:
            return b''

        range_header = f"bytes={offset}-{offset + length - 1}"
        logger.debug(f"GET {self.url} Range: {range_header}")
        self.request_count += 1
        try:
            response = await self.client.get(self.url, headers={"Range": range_header})
        except httpx.RequestError as e:
            raise TransportError(
                f"Request for {range_header} of {self.url} failed: {e}",
                url=self.url, offset=offset, length=length
            ) from e

        if response.status_code == 206:
            data = response.content
        elif response.status_code == 200:
            # The server ignored the Range header and sent the whole resource
            logger.warning(f"Server ignored Range header for {self.url}; slicing full response")
            data = response.content[offset:offset + length]
        else:
            raise TransportError(
                f"HTTP {response.status_code} for {range_header} of {self.url}",
                url=self.url, offset=offset, length=length, status_code=response.status_code
            )

        data = _check_length(self.url, data, offset, length, required)
        self.bytes_fetched += len(data)
        return data


class BytesRangeSource:
    """Serve byte ranges from an in-memory buffer."""

    def __init__(self, data: bytes, name: str = '<memory>'):
        self.data = bytes(data)
        self.name = name
        self.request_count = 0
        self.bytes_fetched = 0

    async def fetch(self, offset: int, length: int, min_length: Optional[int] = None) -> bytes:
        required = _check_request(offset, length, min_length)
        self.request_count += 1
        data = _check_length(self.name, self.data[offset:offset + length], offset, length, required)
        self.bytes_fetched += len(data)
        return data


class FileRangeSource:
    """Serve byte ranges from a local file, reading in the default executor."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.name = str(self.path)
        self.request_count = 0
        self.bytes_fetched = 0
        if not self.path.is_file():
            raise TransportError(f"File not found: {self.path}", url=self.name, offset=0, length=0)

    def _read(self, offset: int, length: int) -> bytes:
        with open(self.path, 'rb') as f:
            f.seek(offset)
            return f.read(length)

    async def fetch(self, offset: int, length: int, min_length: Optional[int] = None) -> bytes:
        required = _check_request(offset, length, min_length)
        self.request_count += 1
        loop = asyncio.get_running_loop()
        try:
            data = await loop.run_in_executor(None, self._read, offset, length)
        except OSError as e:
            raise TransportError(f"Cannot read {self.path}: {e}", url=self.name, offset=offset, length=length) from e
        data = _check_length(self.name, data, offset, length, required)
        self.bytes_fetched += len(data)
        return data
