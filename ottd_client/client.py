import asyncio
import enum
import logging
from typing import Optional, Dict, Callable, Awaitable, Union
from . import protocol
from . import handlers
from .framer import PacketFramer
from .game_state import GameState
from .packet_debugger import PacketDebugger
from .scheduler import CommandScheduler, Period

logger = logging.getLogger(__name__)

# Seconds to wait before every reconnect attempt (constant, no growth)
RECONNECT_DELAY = 2.0

READ_CHUNK_SIZE = 1024


class ConnectionState(enum.Enum):
    DISCONNECTED = 'disconnected'
    CONNECTING = 'connecting'
    AUTHENTICATING = 'authenticating'
    ACTIVE = 'active'


PacketHandler = Callable[['OpenTTDAdminClient', GameState, bytes], Awaitable[None]]


class OpenTTDAdminClient:
    reader: Optional[asyncio.StreamReader]
    writer: Optional[asyncio.StreamWriter]
    state: ConnectionState
    scheduler: CommandScheduler
    game_state: Optional[GameState]
    reconnect_delay: float
    _framer: PacketFramer
    _connected: Optional[asyncio.Event]
    _disconnected: Optional[asyncio.Event]
    _packet_handlers: Dict[int, PacketHandler]
    _packet_reader_task: Optional[asyncio.Task]
    _packet_debugger: Optional[PacketDebugger]

    def __init__(self, debug_packets_dir: Optional[str] = None, reconnect_delay: float = RECONNECT_DELAY):
        self.reader = None
        self.writer = None
        self.state = ConnectionState.DISCONNECTED
        self.scheduler = CommandScheduler()
        self.game_state = None
        self.reconnect_delay = reconnect_delay
        self._framer = PacketFramer()
        self._connected = None
        self._disconnected = None
        self._packet_handlers = {}
        self._packet_reader_task = None

        if debug_packets_dir:
            self._packet_debugger = PacketDebugger(debug_packets_dir)
            logger.info("Packet debugging enabled: %s/", debug_packets_dir)
        else:
            self._packet_debugger = None

        # Register packet handlers
        self.register_handler(protocol.ADMIN_PACKET_SERVER_FULL, handlers.handle_server_full)
        self.register_handler(protocol.ADMIN_PACKET_SERVER_BANNED, handlers.handle_server_banned)
        self.register_handler(protocol.ADMIN_PACKET_SERVER_ERROR, handlers.handle_server_error)
        self.register_handler(protocol.ADMIN_PACKET_SERVER_PROTOCOL, handlers.handle_server_protocol)
        self.register_handler(protocol.ADMIN_PACKET_SERVER_WELCOME, handlers.handle_server_welcome)
        self.register_handler(protocol.ADMIN_PACKET_SERVER_NEWGAME, handlers.handle_server_newgame)
        self.register_handler(protocol.ADMIN_PACKET_SERVER_SHUTDOWN, handlers.handle_server_shutdown)
        self.register_handler(protocol.ADMIN_PACKET_SERVER_DATE, handlers.handle_server_date)
        self.register_handler(protocol.ADMIN_PACKET_SERVER_CHAT, handlers.handle_server_chat)
        self.register_handler(protocol.ADMIN_PACKET_SERVER_RCON, handlers.handle_server_rcon)
        self.register_handler(protocol.ADMIN_PACKET_SERVER_RCON_END, handlers.handle_server_rcon_end)

    def register_handler(self, packet_type: int, handler: PacketHandler) -> None:
        """
        Register a packet handler function for a specific packet type.

        Args:
            packet_type: The packet type number to handle
            handler: Async function that takes (client, game_state, payload) and processes the packet
        """
        self._packet_handlers[packet_type] = handler

    def register_date_change(self, period: Union[Period, str], command: str) -> None:
        """
        Run an RCON command whenever the in-game date crosses a period boundary.

        The possible periods are 'daily', 'monthly' and 'yearly'. The command may
        contain %Y, %M and %D, which are replaced by the new date. Must be called
        before run().
        """
        self.scheduler.register(period, command)

    def _set_state(self, state: ConnectionState) -> None:
        if state is not self.state:
            logger.debug("connection state %s -> %s", self.state.value, state.value)
            self.state = state

    async def connect(self, host: str, port: int) -> bool:
        """
        Open the TCP connection to the admin port.

        Server state and the receive buffer start empty for every connection.

        Returns:
            True if connection successful
        """
        self.reader, self.writer = await asyncio.open_connection(host, port)
        logger.info("connected to %s:%d", host, port)
        self.game_state = GameState()
        self._framer = PacketFramer()
        return True

    async def send_packet(self, packet: bytes) -> None:
        """
        Write one encoded packet to the server.

        Raises:
            ConnectionError: If there is no open connection, or the write fails
        """
        if not self.writer:
            raise ConnectionError("Not connected to server")

        if self._packet_debugger:
            self._packet_debugger.write_outbound_packet(packet, packet[2])

        self.writer.write(packet)
        await self.writer.drain()

    async def send_join(self, password: str, bot_name: str, bot_version: str) -> None:
        """Authenticate as an admin. There is no reply to wait for; a welcome follows."""
        await self.send_packet(protocol.encode_admin_join(password, bot_name, bot_version))
        logger.debug("sent JOIN as %s %s", bot_name, bot_version)

    async def send_update_frequency(self, update_type: int, frequency: int) -> None:
        await self.send_packet(protocol.encode_admin_update_frequency(update_type, frequency))
        logger.debug("registered update type %d at frequency 0x%02x", update_type, frequency)

    async def send_rcon(self, command: str) -> None:
        """Send a console command. Output arrives as RCON packets, then RCON_END."""
        logger.info("rcon> %s", command)
        await self.send_packet(protocol.encode_admin_rcon(command))

    async def send_quit(self) -> None:
        await self.send_packet(protocol.encode_admin_quit())

    async def start_packet_reader(self) -> None:
        """
        Start the packet reading loop for the current connection.

        Creates the connected/disconnected events for this attempt. The reader
        does not touch the transport until the connected event is set.
        """
        self._connected = asyncio.Event()
        self._disconnected = asyncio.Event()
        self._packet_reader_task = asyncio.create_task(self._packet_reading_loop())

    async def _packet_reading_loop(self) -> None:
        """
        Read from the socket, split the stream into packets and dispatch them.

        Runs until the connection fails or the server shuts down, then sets the
        disconnected event exactly once.
        """
        await self._connected.wait()
        try:
            while True:
                data = await self.reader.read(READ_CHUNK_SIZE)
                if not data:
                    raise ConnectionError("Connection closed by server")

                for packet_type, payload in self._framer.feed(data):
                    if self._packet_debugger:
                        self._packet_debugger.write_inbound_packet(
                            protocol.encode_packet(packet_type, payload), packet_type)
                    await self._dispatch_packet(packet_type, payload)

        except ConnectionResetError:
            logger.warning("Connection reset by peer - check the openttd log for details")
        except protocol.ServerShutdown as e:
            logger.info("%s", e)
        except protocol.FramingError as e:
            logger.error("Protocol framing error, dropping connection: %s", e)
        except ConnectionError as e:
            logger.warning("Connection error: %s", e)
        except OSError as e:
            logger.error("Error occurred on socket: %s", e)
        except Exception:
            logger.exception("Unexpected error in packet reading loop")
        finally:
            self._disconnected.set()

    async def _dispatch_packet(self, packet_type: int, payload: bytes) -> None:
        """
        Dispatch a packet to its registered handler.

        If no handler is registered, call the unknown packet handler. A packet
        that fails to decode is logged and dropped; the connection carries on.
        """
        handler = self._packet_handlers.get(packet_type)
        try:
            if handler:
                await handler(self, self.game_state, payload)
            else:
                await handlers.handle_unknown_packet(self, self.game_state, packet_type, payload)
        except protocol.PacketDecodeError as e:
            logger.warning("Dropping malformed packet type %d: %s", packet_type, e)

    async def run(self, host: str, port: int, password: str, bot_name: str, bot_version: str,
                  shutdown_event: Optional[asyncio.Event] = None) -> None:
        """
        Connect to the admin port and keep the connection alive.

        Reconnects after every failure, waiting reconnect_delay seconds first.
        Never returns unless shutdown_event is given and gets set; then a QUIT
        is sent (if still connected) and the connection is closed.

        Args:
            host: Server hostname or IP address
            port: Admin port (3977 by default on the server)
            password: admin_password from the server's openttd.cfg
            bot_name: Client name shown to the server
            bot_version: Client version shown to the server
            shutdown_event: Optional event that stops the loop when set
        """
        if shutdown_event is None:
            shutdown_event = asyncio.Event()
        self.scheduler.freeze()

        try:
            while not shutdown_event.is_set():
                self._set_state(ConnectionState.CONNECTING)
                logger.info("connecting to %s:%d...", host, port)
                self.game_state = None
                try:
                    await self.connect(host, port)
                except OSError as e:
                    logger.error("error connecting: %s", e)
                    self._set_state(ConnectionState.DISCONNECTED)
                    await self._backoff(shutdown_event)
                    continue

                await self.start_packet_reader()
                self._connected.set()

                self._set_state(ConnectionState.AUTHENTICATING)
                try:
                    await self.send_join(password, bot_name, bot_version)
                    await self.send_update_frequency(protocol.ADMIN_UPDATE_DATE,
                                                     protocol.ADMIN_FREQUENCY_DAILY)
                except OSError as e:
                    logger.warning("handshake failed: %s", e)
                    # Closing the transport makes the reader see EOF and signal
                    self.writer.close()
                else:
                    self._set_state(ConnectionState.ACTIVE)

                await self._wait_for_disconnect(shutdown_event)
                if shutdown_event.is_set():
                    break

                await self.stop_and_disconnect()
                self._set_state(ConnectionState.DISCONNECTED)
                logger.info("Reconnecting in %.1f seconds...", self.reconnect_delay)
                await self._backoff(shutdown_event)
        finally:
            if self.writer and self._disconnected and not self._disconnected.is_set():
                try:
                    await self.send_quit()
                except OSError as e:
                    logger.debug("could not send QUIT: %s", e)
            await self.stop_and_disconnect()
            self._set_state(ConnectionState.DISCONNECTED)

    async def _wait_for_disconnect(self, shutdown_event: asyncio.Event) -> None:
        waiters = [
            asyncio.create_task(self._disconnected.wait()),
            asyncio.create_task(shutdown_event.wait()),
        ]
        try:
            await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for waiter in waiters:
                waiter.cancel()
            await asyncio.gather(*waiters, return_exceptions=True)

    async def _backoff(self, shutdown_event: asyncio.Event) -> None:
        """Sleep reconnect_delay seconds, waking early on shutdown."""
        try:
            await asyncio.wait_for(shutdown_event.wait(), timeout=self.reconnect_delay)
        except asyncio.TimeoutError:
            pass

    async def stop_and_disconnect(self) -> None:
        """
        Stop the packet reader task and disconnect from the server.
        """
        if self._packet_reader_task and not self._packet_reader_task.done():
            self._packet_reader_task.cancel()
            try:
                await self._packet_reader_task
            except asyncio.CancelledError:
                pass
        self._packet_reader_task = None

        await self.disconnect()

    async def disconnect(self) -> bool:
        """
        Close the connection and drop any partially received packet.

        Returns:
            True if disconnection successful
        """
        self._framer.clear()

        if self.writer:
            writer, self.writer, self.reader = self.writer, None, None
            writer.close()
            try:
                await writer.wait_closed()
            except OSError as e:
                logger.debug("error while closing connection: %s", e)
            logger.info("disconnected from server")
        return True
