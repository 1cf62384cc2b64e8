import logging
import struct
from typing import Tuple

from .dates import GameDate

logger = logging.getLogger(__name__)

# Packet type constants (admin -> server)
ADMIN_PACKET_ADMIN_JOIN = 0
ADMIN_PACKET_ADMIN_QUIT = 1
ADMIN_PACKET_ADMIN_UPDATE_FREQUENCY = 2
ADMIN_PACKET_ADMIN_POLL = 3
ADMIN_PACKET_ADMIN_CHAT = 4
ADMIN_PACKET_ADMIN_RCON = 5
ADMIN_PACKET_ADMIN_GAMESCRIPT = 6
ADMIN_PACKET_ADMIN_PING = 7

# Packet type constants (server -> admin)
ADMIN_PACKET_SERVER_FULL = 100
ADMIN_PACKET_SERVER_BANNED = 101
ADMIN_PACKET_SERVER_ERROR = 102
ADMIN_PACKET_SERVER_PROTOCOL = 103
ADMIN_PACKET_SERVER_WELCOME = 104
ADMIN_PACKET_SERVER_NEWGAME = 105
ADMIN_PACKET_SERVER_SHUTDOWN = 106
ADMIN_PACKET_SERVER_DATE = 107
ADMIN_PACKET_SERVER_CHAT = 119
ADMIN_PACKET_SERVER_RCON = 120
ADMIN_PACKET_SERVER_CONSOLE = 121
ADMIN_PACKET_SERVER_RCON_END = 125
ADMIN_PACKET_SERVER_PONG = 126

# Update categories for ADMIN_PACKET_ADMIN_UPDATE_FREQUENCY
ADMIN_UPDATE_DATE = 0
ADMIN_UPDATE_CLIENT_INFO = 1
ADMIN_UPDATE_COMPANY_INFO = 2
ADMIN_UPDATE_COMPANY_ECONOMY = 3
ADMIN_UPDATE_COMPANY_STATS = 4
ADMIN_UPDATE_CHAT = 5
ADMIN_UPDATE_CONSOLE = 6
ADMIN_UPDATE_CMD_NAMES = 7
ADMIN_UPDATE_CMD_LOGGING = 8
ADMIN_UPDATE_GAMESCRIPT = 9

# Update frequency bits
ADMIN_FREQUENCY_POLL = 0x01
ADMIN_FREQUENCY_DAILY = 0x02
ADMIN_FREQUENCY_WEEKLY = 0x04
ADMIN_FREQUENCY_MONTHLY = 0x08
ADMIN_FREQUENCY_QUARTERLY = 0x10
ADMIN_FREQUENCY_ANUALLY = 0x20
ADMIN_FREQUENCY_AUTOMATIC = 0x40

# 2-byte length + 1-byte type
HEADER_SIZE = 3


class PacketDecodeError(ValueError):
    """A single packet could not be decoded. The connection stays usable."""


class FramingError(ConnectionError):
    """The byte stream no longer lines up with packet boundaries."""


class ServerShutdown(ConnectionError):
    """The server announced it is going away."""


class PayloadReader:
    """
    Cursor over a packet payload.

    Every read is bounds-checked and raises PacketDecodeError instead of
    IndexError or struct.error when the payload is too short.
    """

    def __init__(self, payload: bytes, offset: int = 0):
        self._data = payload
        self.offset = offset

    @property
    def remaining(self) -> int:
        return len(self._data) - self.offset

    def _take(self, size: int) -> bytes:
        if size > self.remaining:
            raise PacketDecodeError(
                f"Need {size} bytes at offset {self.offset}, "
                f"only {self.remaining} remaining"
            )
        chunk = self._data[self.offset:self.offset + size]
        self.offset += size
        return chunk

    def skip(self, size: int) -> None:
        self._take(size)

    def read_uint8(self) -> int:
        return self._take(1)[0]

    def read_uint16(self) -> int:
        return struct.unpack('<H', self._take(2))[0]

    def read_uint32(self) -> int:
        return struct.unpack('<I', self._take(4))[0]

    def read_uint64(self) -> int:
        return struct.unpack('<Q', self._take(8))[0]

    def read_string(self) -> str:
        value, self.offset = decode_string(self._data, self.offset)
        return value


# Data type encoding functions

def encode_string(value: str) -> bytes:
    """Encode a STRING as null-terminated UTF-8 bytes."""
    return value.encode('utf-8') + b'\x00'


def encode_uint16(value: int) -> bytes:
    """Encode a UINT16 as 2 bytes in little-endian format."""
    return struct.pack('<H', value)


def decode_string(data: bytes, offset: int) -> Tuple[str, int]:
    """
    Decode a null-terminated STRING from bytes.

    Returns:
        Tuple of (string_value, offset just past the terminator)

    Raises:
        PacketDecodeError: If no terminator exists between offset and the end
    """
    end = data.find(b'\x00', offset)
    if end == -1:
        raise PacketDecodeError(f"Null terminator not found in string at offset {offset}")
    return data[offset:end].decode('utf-8', errors='replace'), end + 1


def encode_packet(packet_type: int, payload: bytes) -> bytes:
    """
    Encode a packet with a header.
    """
    packet_length = len(payload) + HEADER_SIZE
    return struct.pack('<HB', packet_length, packet_type) + payload


def encode_admin_join(password: str, bot_name: str, bot_version: str) -> bytes:
    """
    Encode an ADMIN_PACKET_ADMIN_JOIN packet.

    Packet structure:
    - STRING password
    - STRING bot name
    - STRING bot version
    """
    payload = (encode_string(password) +
               encode_string(bot_name) +
               encode_string(bot_version))
    return encode_packet(ADMIN_PACKET_ADMIN_JOIN, payload)


def encode_admin_update_frequency(update_type: int, frequency: int) -> bytes:
    """
    Encode an ADMIN_PACKET_ADMIN_UPDATE_FREQUENCY packet.

    Packet structure:
    - UINT16 update type (ADMIN_UPDATE_*)
    - UINT16 frequency bitmask (ADMIN_FREQUENCY_*)
    """
    payload = encode_uint16(update_type) + encode_uint16(frequency)
    return encode_packet(ADMIN_PACKET_ADMIN_UPDATE_FREQUENCY, payload)


def encode_admin_rcon(command: str) -> bytes:
    """Encode an ADMIN_PACKET_ADMIN_RCON packet carrying one console command."""
    return encode_packet(ADMIN_PACKET_ADMIN_RCON, encode_string(command))


def encode_admin_quit() -> bytes:
    """Encode an ADMIN_PACKET_ADMIN_QUIT packet (no payload)."""
    return encode_packet(ADMIN_PACKET_ADMIN_QUIT, b'')


def decode_server_protocol(payload: bytes) -> dict:
    """
    Decode ADMIN_PACKET_SERVER_PROTOCOL.

    Packet structure:
    - UINT8 protocol version
    - repeated: BOOL more, UINT16 update type, UINT16 allowed frequencies
      (terminated by more == 0)
    """
    reader = PayloadReader(payload)
    version = reader.read_uint8()
    frequencies = {}
    while reader.read_uint8():
        update_type = reader.read_uint16()
        frequencies[update_type] = reader.read_uint16()
    return {
        'version': version,
        'update_frequencies': frequencies,
    }


def decode_server_welcome(payload: bytes) -> dict:
    """
    Decode ADMIN_PACKET_SERVER_WELCOME.

    Packet structure:
    - STRING server name
    - STRING server (network) revision
    - BOOL   dedicated server
    - STRING map name
    - UINT32 generation seed
    - UINT8  landscape
    - UINT32 start date (skipped)
    - UINT16 map width
    - UINT16 map height

    A dedicated byte other than 0 or 1 is logged and decoded as None.
    """
    reader = PayloadReader(payload)
    server_name = reader.read_string()
    server_version = reader.read_string()

    raw_dedicated = reader.read_uint8()
    if raw_dedicated == 0:
        dedicated = False
    elif raw_dedicated == 1:
        dedicated = True
    else:
        logger.warning("Welcome packet has non-boolean dedicated flag %d", raw_dedicated)
        dedicated = None

    map_name = reader.read_string()
    map_seed = reader.read_uint32()
    map_landscape = reader.read_uint8()
    reader.skip(4)
    map_width = reader.read_uint16()
    map_height = reader.read_uint16()

    return {
        'server_name': server_name,
        'server_version': server_version,
        'dedicated': dedicated,
        'map_name': map_name,
        'map_seed': map_seed,
        'map_landscape': map_landscape,
        'map_width': map_width,
        'map_height': map_height,
    }


def decode_server_date(payload: bytes) -> GameDate:
    """Decode ADMIN_PACKET_SERVER_DATE: UINT32 days since year 0, January 1."""
    return GameDate.from_days(PayloadReader(payload).read_uint32())


def decode_server_chat(payload: bytes) -> dict:
    """
    Decode ADMIN_PACKET_SERVER_CHAT.

    Packet structure:
    - UINT8  network action
    - UINT8  destination type
    - UINT32 client id
    - STRING message
    - UINT64 money (give-money actions only, otherwise 0)
    """
    reader = PayloadReader(payload)
    return {
        'action': reader.read_uint8(),
        'dest_type': reader.read_uint8(),
        'client_id': reader.read_uint32(),
        'message': reader.read_string(),
        'data': reader.read_uint64(),
    }


def decode_server_rcon(payload: bytes) -> dict:
    """Decode ADMIN_PACKET_SERVER_RCON: UINT16 colour, STRING output line."""
    reader = PayloadReader(payload)
    return {
        'colour': reader.read_uint16(),
        'text': reader.read_string(),
    }


def decode_server_rcon_end(payload: bytes) -> str:
    """Decode ADMIN_PACKET_SERVER_RCON_END: the command that just finished."""
    return PayloadReader(payload).read_string()


def decode_server_error(payload: bytes) -> int:
    """Decode ADMIN_PACKET_SERVER_ERROR: UINT8 network error code."""
    return PayloadReader(payload).read_uint8()
