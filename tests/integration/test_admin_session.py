"""
Integration tests running the client against a local fake admin port.

The fake server speaks the real wire format over TCP, deliberately sends
packets in small fragments, and ends the first session with a SHUTDOWN so
the reconnect path is exercised end to end.
"""

import asyncio
import struct
import pytest

from ottd_client import protocol
from ottd_client.client import OpenTTDAdminClient
from ottd_client.dates import GameDate
from ottd_client.framer import PacketFramer
from tests.conftest import build_welcome_payload


class FakeAdminServer:
    """Records every packet each session sends and replays a scripted stream."""

    def __init__(self, first_session_stream: bytes, expected_rcon: int):
        self.first_session_stream = first_session_stream
        self.expected_rcon = expected_rcon
        self.sessions = []
        self.second_session_ready = asyncio.Event()
        self.second_session_closed = asyncio.Event()

    async def _read_until(self, reader, framer, packets, count):
        while len(packets) < count:
            data = await reader.read(1024)
            if not data:
                return False
            packets.extend(framer.feed(data))
        return True

    async def handle(self, reader, writer):
        index = len(self.sessions)
        framer = PacketFramer()
        packets = []
        self.sessions.append(packets)

        try:
            if not await self._read_until(reader, framer, packets, 2):
                return

            if index == 0:
                stream = self.first_session_stream
                for i in range(0, len(stream), 5):
                    writer.write(stream[i:i + 5])
                    await writer.drain()
                await self._read_until(reader, framer, packets, 2 + self.expected_rcon)
                writer.write(protocol.encode_packet(protocol.ADMIN_PACKET_SERVER_SHUTDOWN, b''))
                await writer.drain()
            else:
                self.second_session_ready.set()
                await self._read_until(reader, framer, packets, 3)
        finally:
            writer.close()
            if index == 1:
                self.second_session_closed.set()


@pytest.mark.integration
@pytest.mark.network
async def test_session_schedule_shutdown_and_reconnect():
    first_session_stream = (
        protocol.encode_packet(protocol.ADMIN_PACKET_SERVER_PROTOCOL, bytes([3]) + b'\x00') +
        protocol.encode_packet(protocol.ADMIN_PACKET_SERVER_WELCOME, build_welcome_payload()) +
        protocol.encode_packet(protocol.ADMIN_PACKET_SERVER_DATE,
                               struct.pack('<I', GameDate(1951, 1, 1).to_days()))
    )
    fake = FakeAdminServer(first_session_stream, expected_rcon=3)
    server = await asyncio.start_server(fake.handle, '127.0.0.1', 0)
    port = server.sockets[0].getsockname()[1]

    client = OpenTTDAdminClient(reconnect_delay=0.05)
    client.register_date_change('daily', 'say "%Y-%M-%D"')
    client.register_date_change('monthly', 'save month_%M')
    client.register_date_change('yearly', 'save year_%Y')

    shutdown_event = asyncio.Event()
    run_task = asyncio.create_task(
        client.run('127.0.0.1', port, 'secret', 'test-bot', '1.0', shutdown_event=shutdown_event))

    try:
        await asyncio.wait_for(fake.second_session_ready.wait(), timeout=5)
        shutdown_event.set()
        await asyncio.wait_for(run_task, timeout=5)
        await asyncio.wait_for(fake.second_session_closed.wait(), timeout=5)
    finally:
        shutdown_event.set()
        server.close()
        await server.wait_closed()

    join = (protocol.ADMIN_PACKET_ADMIN_JOIN, b'secret\x00test-bot\x001.0\x00')
    date_daily = (protocol.ADMIN_PACKET_ADMIN_UPDATE_FREQUENCY, b'\x00\x00\x02\x00')

    first, second = fake.sessions
    assert first == [
        join,
        date_daily,
        (protocol.ADMIN_PACKET_ADMIN_RCON, b'say "1951-01-01"\x00'),
        (protocol.ADMIN_PACKET_ADMIN_RCON, b'save month_01\x00'),
        (protocol.ADMIN_PACKET_ADMIN_RCON, b'save year_1951\x00'),
    ]
    assert second == [join, date_daily, (protocol.ADMIN_PACKET_ADMIN_QUIT, b'')]

    # State from the first session does not survive the reconnect
    assert client.game_state.server is None
