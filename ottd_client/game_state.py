"""
Server state tracking for the OpenTTD admin client.

The GameState class holds what the server has told us on the current
connection. A fresh instance is created for every connection attempt.
"""

from dataclasses import dataclass
from typing import Optional, Dict


@dataclass
class ServerInfo:
    """
    Server and map details from ADMIN_PACKET_SERVER_WELCOME (packet 104).

    Replaced as a whole on every welcome packet.
    """
    name: str
    version: str
    dedicated: Optional[bool]  # None when the server sent a non-boolean byte
    map_name: str
    map_seed: int
    map_landscape: int         # 0=temperate, 1=arctic, 2=tropic, 3=toyland
    map_width: int
    map_height: int


class GameState:
    """Tracks the state reported by the server on one connection."""

    def __init__(self):
        self.server: Optional[ServerInfo] = None
        self.protocol_version: Optional[int] = None
        # update type -> allowed frequency bitmask, from PACKET_SERVER_PROTOCOL
        self.update_frequencies: Dict[int, int] = {}

    def update_server_info(self, data: dict) -> ServerInfo:
        """Replace server info with a freshly decoded welcome packet."""
        self.server = ServerInfo(
            name=data['server_name'],
            version=data['server_version'],
            dedicated=data['dedicated'],
            map_name=data['map_name'],
            map_seed=data['map_seed'],
            map_landscape=data['map_landscape'],
            map_width=data['map_width'],
            map_height=data['map_height'],
        )
        return self.server

    def update_protocol(self, data: dict) -> None:
        self.protocol_version = data['version']
        self.update_frequencies = dict(data['update_frequencies'])
