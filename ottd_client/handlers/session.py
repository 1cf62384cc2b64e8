import logging
from typing import TYPE_CHECKING

from ottd_client import protocol
from ottd_client.game_state import GameState

if TYPE_CHECKING:
    from ottd_client.client import OpenTTDAdminClient

logger = logging.getLogger(__name__)


async def handle_server_protocol(client: 'OpenTTDAdminClient', game_state: GameState, payload: bytes) -> None:
    """
    Handle ADMIN_PACKET_SERVER_PROTOCOL.

    Records the protocol version and the update frequencies the server allows.
    """
    data = protocol.decode_server_protocol(payload)
    game_state.update_protocol(data)
    logger.debug("server protocol version %d, %d update types",
                 data['version'], len(data['update_frequencies']))


async def handle_server_welcome(client: 'OpenTTDAdminClient', game_state: GameState, payload: bytes) -> None:
    """
    Handle ADMIN_PACKET_SERVER_WELCOME.

    Replaces the cached server info and logs a summary.
    """
    logger.info("received welcome packet")
    server = game_state.update_server_info(protocol.decode_server_welcome(payload))
    logger.info("server: %s version: %s dedicated: %s map: %s %d/%d size",
                server.name, server.version, server.dedicated,
                server.map_name, server.map_width, server.map_height)


async def handle_server_shutdown(client: 'OpenTTDAdminClient', game_state: GameState, payload: bytes) -> None:
    """Handle ADMIN_PACKET_SERVER_SHUTDOWN by ending the connection."""
    raise protocol.ServerShutdown("server shutting down - will try to reconnect")


async def handle_server_newgame(client: 'OpenTTDAdminClient', game_state: GameState, payload: bytes) -> None:
    """Handle ADMIN_PACKET_SERVER_NEWGAME. A welcome packet follows."""
    logger.info("server is starting a new game")


async def handle_server_full(client: 'OpenTTDAdminClient', game_state: GameState, payload: bytes) -> None:
    logger.warning("server refused connection: no free admin slots")


async def handle_server_banned(client: 'OpenTTDAdminClient', game_state: GameState, payload: bytes) -> None:
    logger.warning("server refused connection: this address is banned")


async def handle_server_error(client: 'OpenTTDAdminClient', game_state: GameState, payload: bytes) -> None:
    """Handle ADMIN_PACKET_SERVER_ERROR, typically a wrong password."""
    error_code = protocol.decode_server_error(payload)
    logger.error("server reported network error %d - check the admin password", error_code)


__all__ = [
    "handle_server_protocol",
    "handle_server_welcome",
    "handle_server_shutdown",
    "handle_server_newgame",
    "handle_server_full",
    "handle_server_banned",
    "handle_server_error",
]
