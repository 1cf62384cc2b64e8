"""
Shared pytest fixtures for OpenTTD admin client tests.

This module provides reusable fixtures for:
- Mock network streams (StreamReader/StreamWriter)
- Component instances (GameState, OpenTTDAdminClient)
- Sample packet data
- Utility helpers
"""

import asyncio
import struct
from typing import Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from ottd_client.game_state import GameState


# ============================================================================
# Mock Network Stream Fixtures
# ============================================================================


@pytest.fixture
def mock_stream_reader():
    """
    Mock asyncio.StreamReader for testing socket reads.

    Usage:
        def test_read(mock_stream_reader):
            mock_stream_reader.read = AsyncMock(side_effect=[b'\\x03\\x00\\x6a', b''])
    """
    reader = AsyncMock(spec=asyncio.StreamReader)
    reader.read = AsyncMock()
    reader.at_eof = MagicMock(return_value=False)
    return reader


@pytest.fixture
def mock_stream_writer():
    """
    Mock asyncio.StreamWriter for testing packet writing.

    Usage:
        def test_write(mock_stream_writer):
            await client.send_rcon("pause")
            mock_stream_writer.write.assert_called_once()
            mock_stream_writer.drain.assert_called_once()
    """
    return make_stream_writer()


def make_stream_writer():
    writer = AsyncMock(spec=asyncio.StreamWriter)
    writer.write = MagicMock()
    writer.drain = AsyncMock()
    writer.close = MagicMock()
    writer.wait_closed = AsyncMock()
    writer.is_closing = MagicMock(return_value=False)
    return writer


@pytest.fixture
def mock_stream_pair(mock_stream_reader, mock_stream_writer):
    """Convenience fixture providing both reader and writer."""
    return (mock_stream_reader, mock_stream_writer)


# ============================================================================
# Component Instance Fixtures
# ============================================================================


@pytest.fixture
def game_state():
    """Fresh GameState instance for testing state tracking."""
    return GameState()


@pytest.fixture
def admin_client(mock_stream_pair, game_state):
    """
    OpenTTDAdminClient with mocked streams already attached.

    Does NOT call connect(); the reader/writer and game state are injected.
    """
    from ottd_client.client import OpenTTDAdminClient

    client = OpenTTDAdminClient(reconnect_delay=0.01)
    client.reader, client.writer = mock_stream_pair
    client.game_state = game_state
    return client


# ============================================================================
# Sample Packet Data Fixtures
# ============================================================================


def build_welcome_payload(name='My Server', version='14.1', dedicated=1,
                          map_name='Random Map', seed=0xDEADBEEF, landscape=2,
                          start_date=730851, width=512, height=256) -> bytes:
    """Build an ADMIN_PACKET_SERVER_WELCOME payload from field values."""
    return (name.encode('utf-8') + b'\x00' +
            version.encode('utf-8') + b'\x00' +
            bytes([dedicated]) +
            map_name.encode('utf-8') + b'\x00' +
            struct.pack('<IBIHH', seed, landscape, start_date, width, height))


@pytest.fixture
def sample_welcome_payload():
    """Welcome payload with the defaults of build_welcome_payload."""
    return build_welcome_payload()


# ============================================================================
# Utility Helper Fixtures
# ============================================================================


@pytest.fixture
def packet_builder() -> Callable[[int, bytes], bytes]:
    """
    Helper function to build raw packet bytes for testing.

    Returns a function: build_packet(packet_type: int, body: bytes) -> bytes

    Usage:
        def test_frame(packet_builder):
            packet = packet_builder(107, struct.pack('<I', 0))
    """
    def build_packet(packet_type: int, body: bytes) -> bytes:
        # Length field (2 bytes, little-endian) counts the 3 header bytes
        return struct.pack('<HB', len(body) + 3, packet_type) + body

    return build_packet
