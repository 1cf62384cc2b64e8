import logging
from typing import TYPE_CHECKING

from ottd_client.game_state import GameState

if TYPE_CHECKING:
    from ottd_client.client import OpenTTDAdminClient

logger = logging.getLogger(__name__)


async def handle_unknown_packet(client: 'OpenTTDAdminClient', game_state: GameState, packet_type: int, payload: bytes) -> None:
    """
    Handle packet types without a registered handler.

    Logs the payload verbatim (text and hex) and lets processing continue.
    """
    hex_dump = ' '.join(f'{b:02x}' for b in payload)
    logger.info("unknown packet received from server: type %d, %d bytes: %r [%s]",
                packet_type, len(payload), payload, hex_dump)


__all__ = [
    "handle_unknown_packet",
]
