"""Tests for ledger height sources."""
import asyncio
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from credit_engine.services.height import (
    ClockHeightSource,
    HeightSource,
    HeightSourceError,
    HttpHeightSource,
    ManualHeightSource,
    build_height_source,
)

BASE = "http://height.test"


def _response(status_code: int, body) -> httpx.Response:
    return httpx.Response(status_code, json=body, request=httpx.Request("GET", f"{BASE}/height"))


class TestHeightSourceBase:
    def test_base_class_is_abstract(self):
        with pytest.raises(TypeError):
            HeightSource()


class TestManualHeightSource:
    def test_advance(self):
        source = ManualHeightSource(height=10)
        assert source.advance(5) == 15
        assert asyncio.run(source.current_height()) == 15

    def test_cannot_move_backwards(self):
        with pytest.raises(ValueError):
            ManualHeightSource().advance(-1)


class TestClockHeightSource:
    def test_height_from_clock(self):
        source = ClockHeightSource(block_interval_seconds=10)

        with patch("credit_engine.services.height.time.time", return_value=1005.0):
            assert asyncio.run(source.current_height()) == 100

    def test_never_decreases(self):
        source = ClockHeightSource(block_interval_seconds=10)

        with patch("credit_engine.services.height.time.time", return_value=1005.0):
            asyncio.run(source.current_height())
        with patch("credit_engine.services.height.time.time", return_value=500.0):
            assert asyncio.run(source.current_height()) == 100


class TestHttpHeightSource:
    def test_reads_height(self):
        source = HttpHeightSource(base_url=BASE)

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=_response(200, {"height": 4242})):
            assert asyncio.run(source.current_height()) == 4242

    def test_http_error(self):
        source = HttpHeightSource(base_url=BASE)

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=_response(500, {})):
            with pytest.raises(HeightSourceError) as exc_info:
                asyncio.run(source.current_height())
        assert exc_info.value.status_code == 500

    def test_malformed_body(self):
        source = HttpHeightSource(base_url=BASE)

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=_response(200, {"tip": 1})):
            with pytest.raises(HeightSourceError):
                asyncio.run(source.current_height())

    def test_negative_height_rejected(self):
        source = HttpHeightSource(base_url=BASE)

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=_response(200, {"height": -3})):
            with pytest.raises(HeightSourceError):
                asyncio.run(source.current_height())

    def test_boolean_height_rejected(self):
        source = HttpHeightSource(base_url=BASE)

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=_response(200, {"height": True})):
            with pytest.raises(HeightSourceError) as exc_info:
                asyncio.run(source.current_height())
        assert exc_info.value.status_code == 502


class TestBuildHeightSource:
    def test_known_kinds(self):
        assert isinstance(build_height_source("clock"), ClockHeightSource)
        assert isinstance(build_height_source("http"), HttpHeightSource)

    def test_manual_kind_starts_at_zero(self):
        source = build_height_source("manual")

        assert isinstance(source, ManualHeightSource)
        assert asyncio.run(source.current_height()) == 0

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            build_height_source("sundial")
