import logging
from typing import TYPE_CHECKING

from ottd_client import protocol
from ottd_client.game_state import GameState

if TYPE_CHECKING:
    from ottd_client.client import OpenTTDAdminClient

logger = logging.getLogger(__name__)


async def handle_server_chat(client: 'OpenTTDAdminClient', game_state: GameState, payload: bytes) -> None:
    """Handle ADMIN_PACKET_SERVER_CHAT. Decoded and logged only."""
    data = protocol.decode_server_chat(payload)
    logger.info("chat message: action %d desttype %d, client id %d msg %s data %d",
                data['action'], data['dest_type'], data['client_id'],
                data['message'], data['data'])


__all__ = [
    "handle_server_chat",
]
