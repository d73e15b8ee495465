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
Unit tests for the range sources.

HTTP behavior is exercised through httpx.MockTransport; no request leaves
the process.
"""

import asyncio
import time

import httpx
import pytest

from cogmeta.utils.exceptions import TransportError
from cogmeta.utils.range_source import BytesRangeSource, FileRangeSource, HttpRangeSource, RangeSource

URL = "https://data.example.com/scene.tif"


def range_server(data: bytes, requests: list, honor_range: bool = True):
    """Build a MockTransport handler that serves `data` with Range support."""
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        range_header = request.headers.get("Range")
        if not honor_range or range_header is None:
            return httpx.Response(200, content=data)
        start, end = range_header.removeprefix("bytes=").split("-")
        start, end = int(start), int(end)
        if start >= len(data):
            return httpx.Response(416)
        return httpx.Response(206, content=data[start:end + 1])
    return handler


@pytest.mark.unit
class TestHttpRangeSource:
    """Test HTTP Range requests through httpx."""

    async def test_fetch_sends_range_header(self, pattern_bytes):
        requests = []
        async with httpx.AsyncClient(transport=httpx.MockTransport(range_server(pattern_bytes, requests))) as client:
            source = HttpRangeSource(URL, client=client)
            data = await source.fetch(100, 16)

        assert data == pattern_bytes[100:116]
        assert requests[0].headers["Range"] == "bytes=100-115"
        assert source.request_count == 1
        assert source.bytes_fetched == 16

    async def test_short_read_at_end_of_resource(self, pattern_bytes):
        """A padded request past the end succeeds when min_length bytes arrive."""
        requests = []
        async with httpx.AsyncClient(transport=httpx.MockTransport(range_server(pattern_bytes, requests))) as client:
            source = HttpRangeSource(URL, client=client)
            data = await source.fetch(4000, 500, min_length=50)
            assert data == pattern_bytes[4000:]

            with pytest.raises(TransportError) as exc_info:
                await source.fetch(4000, 500)
            assert exc_info.value.offset == 4000

    async def test_full_response_is_sliced(self, pattern_bytes, caplog):
        """A server ignoring Range still yields the requested window."""
        requests = []
        transport = httpx.MockTransport(range_server(pattern_bytes, requests, honor_range=False))
        async with httpx.AsyncClient(transport=transport) as client:
            source = HttpRangeSource(URL, client=client)
            data = await source.fetch(10, 5)

        assert data == pattern_bytes[10:15]
        assert "ignored Range" in caplog.text

    async def test_error_status_raises(self, pattern_bytes):
        requests = []
        async with httpx.AsyncClient(transport=httpx.MockTransport(range_server(pattern_bytes, requests))) as client:
            source = HttpRangeSource(URL, client=client)
            with pytest.raises(TransportError) as exc_info:
                await source.fetch(10_000, 8)

        assert exc_info.value.status_code == 416
        assert exc_info.value.url == URL

    async def test_not_found_raises(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(404))
        async with httpx.AsyncClient(transport=transport) as client:
            with pytest.raises(TransportError) as exc_info:
                await HttpRangeSource(URL, client=client).fetch(0, 8)
        assert exc_info.value.status_code == 404

    async def test_network_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(TransportError) as exc_info:
                await HttpRangeSource(URL, client=client).fetch(0, 8)
        assert isinstance(exc_info.value.__cause__, httpx.RequestError)

    async def test_zero_length_issues_no_request(self):
        requests = []
        async with httpx.AsyncClient(transport=httpx.MockTransport(range_server(b'abc', requests))) as client:
            source = HttpRangeSource(URL, client=client)
            assert await source.fetch(0, 0) == b''
        assert requests == []

    async def test_borrowed_client_stays_open(self):
        async with httpx.AsyncClient(transport=httpx.MockTransport(range_server(b'abc', []))) as client:
            async with HttpRangeSource(URL, client=client):
                pass
            assert not client.is_closed

    async def test_owned_client_closed(self):
        source = HttpRangeSource(URL)
        await source.aclose()
        assert source.client.is_closed


@pytest.mark.unit
class TestLocalSources:
    """Test the in-memory and file sources."""

    async def test_bytes_source(self, pattern_bytes):
        source = BytesRangeSource(pattern_bytes, name='pattern')
        assert isinstance(source, RangeSource)
        assert await source.fetch(8, 4) == pattern_bytes[8:12]
        with pytest.raises(TransportError):
            await source.fetch(4094, 4)
        assert source.request_count == 2

    async def test_negative_range_rejected(self):
        with pytest.raises(ValueError):
            await BytesRangeSource(b'abc').fetch(-1, 2)

    async def test_file_source(self, tmp_path, pattern_bytes):
        path = tmp_path / "pattern.bin"
        path.write_bytes(pattern_bytes)
        source = FileRangeSource(path)

        assert await source.fetch(1000, 10) == pattern_bytes[1000:1010]
        assert await source.fetch(4090, 100, min_length=6) == pattern_bytes[4090:]
        assert source.bytes_fetched == 16

    def test_missing_file(self, tmp_path):
        with pytest.raises(TransportError) as exc_info:
            FileRangeSource(tmp_path / "missing.tif")
        assert exc_info.value.url == str(tmp_path / "missing.tif")

    def test_directory_is_not_a_file(self, tmp_path):
        with pytest.raises(TransportError):
            FileRangeSource(tmp_path)

    async def test_file_read_does_not_block_loop(self, tmp_path, monkeypatch, pattern_bytes):
        """Other tasks keep running while a slow disk read is in progress."""
        path = tmp_path / "pattern.bin"
        path.write_bytes(pattern_bytes)
        source = FileRangeSource(path)
        original_read = FileRangeSource._read

        def slow_read(self, offset, length):
            time.sleep(0.3)
            return original_read(self, offset, length)

        monkeypatch.setattr(FileRangeSource, '_read', slow_read)
        ticks = 0

        async def ticker():
            nonlocal ticks
            while True:
                await asyncio.sleep(0.02)
                ticks += 1

        task = asyncio.create_task(ticker())
        try:
            assert await source.fetch(0, 10) == pattern_bytes[:10]
        finally:
            task.cancel()
        assert ticks >= 3

    async def test_file_read_error(self, tmp_path, monkeypatch):
        path = tmp_path / "pattern.bin"
        path.write_bytes(b'II')
        source = FileRangeSource(path)

        def failing_read(self, offset, length):
            raise PermissionError("denied")

        monkeypatch.setattr(FileRangeSource, '_read', failing_read)
        with pytest.raises(TransportError) as exc_info:
            await source.fetch(0, 2)
        assert exc_info.value.offset == 0
        assert exc_info.value.length == 2
