import logging
from typing import TYPE_CHECKING

from ottd_client import protocol
from ottd_client.game_state import GameState

if TYPE_CHECKING:
    from ottd_client.client import OpenTTDAdminClient

logger = logging.getLogger(__name__)


async def handle_server_date(client: 'OpenTTDAdminClient', game_state: GameState, payload: bytes) -> None:
    """
    Handle ADMIN_PACKET_SERVER_DATE.

    Sends every scheduled command due on the new date, one RCON packet each,
    before the next packet is read.
    """
    date = protocol.decode_server_date(payload)
    logger.debug("date is now %s", date)

    for command in client.scheduler.commands_for(date):
        await client.send_rcon(command)


__all__ = [
    "handle_server_date",
]
