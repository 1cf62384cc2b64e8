#!/usr/bin/env python3
"""
Packet File Validation Tool

Checks packet files captured with --debug-packets: every file must frame to
exactly one complete admin packet with no bytes left over.

Usage:
    python3 tools/validate_packet_files.py <directory>
    python3 tools/validate_packet_files.py packets/  # Example
"""

import sys
from collections import Counter
from pathlib import Path
from typing import List, Optional

from ottd_client.framer import PacketFramer
from ottd_client.protocol import FramingError


class PacketValidationResult:
    """Result of validating a single packet file"""

    def __init__(self, filename: str, packet_type: Optional[int], error: Optional[str]):
        self.filename = filename
        self.packet_type = packet_type
        self.error = error

    @property
    def is_valid(self) -> bool:
        return self.error is None

    def __repr__(self):
        status = "VALID  " if self.is_valid else "INVALID"
        type_str = "???" if self.packet_type is None else f"{self.packet_type:3}"
        detail = f" | {self.error}" if self.error else ""
        return f"{status} | {self.filename:32} | Type {type_str}{detail}"


def validate_packet_file(filepath: Path) -> PacketValidationResult:
    """Frame one captured file and check it holds exactly one packet."""
    data = filepath.read_bytes()
    framer = PacketFramer()
    packets = []

    try:
        packets.extend(framer.feed(data))
    except FramingError as e:
        packet_type = packets[0][0] if packets else None
        return PacketValidationResult(filepath.name, packet_type, str(e))

    if not packets:
        return PacketValidationResult(filepath.name, None, f"truncated: {len(data)} bytes")

    packet_type = packets[0][0]
    if len(packets) > 1 or framer.pending:
        return PacketValidationResult(filepath.name, packet_type,
                                      f"{len(packets)} packets, {framer.pending} trailing bytes")
    return PacketValidationResult(filepath.name, packet_type, None)


def validate_directory(packet_dir: Path) -> List[PacketValidationResult]:
    return [validate_packet_file(path) for path in sorted(packet_dir.glob("*.packet"))]


def print_results(results: List[PacketValidationResult]) -> None:
    for result in results:
        print(result)

    invalid = sum(1 for r in results if not r.is_valid)
    print(f"\nTotal packets validated: {len(results)}")
    print(f"Invalid packets:         {invalid}")

    print("\nPacket type distribution:")
    counts = Counter(r.packet_type for r in results if r.packet_type is not None)
    for packet_type, count in sorted(counts.items()):
        print(f"  Type {packet_type:3}: {count:3} packets")


def main() -> int:
    if len(sys.argv) != 2:
        print("Usage: python3 tools/validate_packet_files.py <directory>")
        return 1

    packet_dir = Path(sys.argv[1])
    if not packet_dir.is_dir():
        print(f"Error: '{packet_dir}' is not a directory")
        return 1

    results = validate_directory(packet_dir)
    if not results:
        print(f"No .packet files found in '{packet_dir}'")
        return 0

    print_results(results)
    return 1 if any(not r.is_valid for r in results) else 0


if __name__ == "__main__":
    sys.exit(main())
