"""
Packet capture for admin port debugging.
"""
import logging
import os
import shutil

logger = logging.getLogger(__name__)


class PacketDebugger:
    """
    Writes every admin packet to its own file for offline inspection.

    File naming: DIRECTION_INDEX_typeNNN.packet
    - DIRECTION: "inbound" (from server) or "outbound" (to server)
    - INDEX: 4-digit zero-padded counter, kept separately per direction
    - typeNNN: 3-digit zero-padded packet type (e.g., type104 for WELCOME)

    Counters keep running across reconnects so a capture of a long session
    is never overwritten.
    """

    def __init__(self, debug_dir: str):
        """
        Create the capture directory, replacing any previous capture.

        Args:
            debug_dir: Directory path to store packet files
        """
        if os.path.exists(debug_dir):
            logger.warning("Packet debug directory '%s' already exists. Removing it.", debug_dir)
            shutil.rmtree(debug_dir)

        os.makedirs(debug_dir)
        self._debug_dir = debug_dir
        self._counters = {'inbound': 0, 'outbound': 0}

    def write_inbound_packet(self, raw_packet: bytes, packet_type: int) -> str:
        """Write a packet received from the server. Returns the file path."""
        return self._write('inbound', raw_packet, packet_type)

    def write_outbound_packet(self, raw_packet: bytes, packet_type: int) -> str:
        """Write a packet sent to the server. Returns the file path."""
        return self._write('outbound', raw_packet, packet_type)

    def _write(self, direction: str, raw_packet: bytes, packet_type: int) -> str:
        self._counters[direction] += 1
        filename = f"{direction}_{self._counters[direction]:04d}_type{packet_type:03d}.packet"
        filepath = os.path.join(self._debug_dir, filename)

        with open(filepath, 'wb') as f:
            f.write(raw_packet)

        return filepath
