"""Reassembly of length-prefixed admin packets from a TCP byte stream."""

import struct
from typing import Iterator, Tuple

from .protocol import FramingError, HEADER_SIZE


class PacketFramer:
    """
    Accumulates raw socket reads and splits off complete packets.

    Wire format: [UINT16 LE total length][UINT8 type][payload], where the
    total length counts the header too. A partial packet stays buffered
    until the rest of it arrives.
    """

    def __init__(self):
        self._buffer = bytearray()

    @property
    def pending(self) -> int:
        """Number of buffered bytes not yet part of a complete packet."""
        return len(self._buffer)

    def feed(self, data: bytes) -> Iterator[Tuple[int, bytes]]:
        """
        Append data to the buffer and iterate over every complete packet.

        The data is buffered immediately; packets are split off as the
        returned iterator is consumed.

        Packets ahead of a bad header are yielded before the error is raised,
        so the result does not depend on how the stream was split into reads.

        Args:
            data: Bytes just read from the transport (any alignment)

        Returns:
            Iterator of (packet_type, payload) tuples in stream order

        Raises:
            FramingError: During iteration, when the packet at the head declares a length too
                small to hold its own header
        """
        self._buffer.extend(data)
        return self._extract_packets()

    def _extract_packets(self) -> Iterator[Tuple[int, bytes]]:
        while len(self._buffer) >= 2:
            packet_length = struct.unpack_from('<H', self._buffer, 0)[0]
            if packet_length < HEADER_SIZE:
                raise FramingError(f"Invalid packet length {packet_length}")

            if len(self._buffer) < packet_length:
                break

            packet_type = self._buffer[2]
            payload = bytes(self._buffer[HEADER_SIZE:packet_length])
            del self._buffer[:packet_length]
            yield packet_type, payload

    def clear(self) -> None:
        """Drop buffered bytes (should be called on disconnect)."""
        self._buffer.clear()

    def __repr__(self) -> str:
        return f"PacketFramer(pending={self.pending})"
