import logging
from typing import TYPE_CHECKING

from ottd_client import protocol
from ottd_client.game_state import GameState

if TYPE_CHECKING:
    from ottd_client.client import OpenTTDAdminClient

logger = logging.getLogger(__name__)


async def handle_server_rcon(client: 'OpenTTDAdminClient', game_state: GameState, payload: bytes) -> None:
    """Handle ADMIN_PACKET_SERVER_RCON, one line of console output."""
    data = protocol.decode_server_rcon(payload)
    logger.info("rcon: colour %d : %s", data['colour'], data['text'])


async def handle_server_rcon_end(client: 'OpenTTDAdminClient', game_state: GameState, payload: bytes) -> None:
    """Handle ADMIN_PACKET_SERVER_RCON_END."""
    command = protocol.decode_server_rcon_end(payload)
    logger.info("rcon end : %s", command)


__all__ = [
    "handle_server_rcon",
    "handle_server_rcon_end",
]
