"""Device-family frame descriptors.

Frame layout::

    +------------+--------+----------------+-------------+------------------+----------+
    | Command ID | Status | EEPROM Address | Data Length |       Data       | Checksum |
    | 1 byte     | 1 byte | 2 bytes (BE)   | 1 byte      | capacity bytes   | 1 byte   |
    +------------+--------+----------------+-------------+------------------+----------+

- The data field starts at ``base_offset``.
- The checksum is the last byte of the frame.
- On the wire the frame is preceded by a one-byte report ID, which is not
  part of ``frame_length`` but is folded into the checksum.
"""

from __future__ import annotations

from dataclasses import dataclass

HEADER_SIZE = 5  # id + status + address(2) + data length


@dataclass(frozen=True)
class CommandDescriptor:
    """Constants that differ between device families."""

    report_id: int
    base_offset: int
    frame_length: int

    def __post_init__(self) -> None:
        if not 0 <= self.report_id <= 0xFF:
            raise ValueError(f"Report ID must be 0-255, got {self.report_id}")
        if self.base_offset < HEADER_SIZE:
            raise ValueError(
                f"Base offset must be at least {HEADER_SIZE}, got {self.base_offset}"
            )
        if self.frame_length < self.base_offset + 2:
            raise ValueError(
                f"Frame length {self.frame_length} leaves no room for data "
                f"after base offset {self.base_offset}"
            )

    @property
    def capacity(self) -> int:
        """Maximum number of data bytes in one frame."""
        return self.frame_length - self.base_offset - 1

    @property
    def checksum_offset(self) -> int:
        return self.frame_length - 1

    @property
    def report_length(self) -> int:
        """Size of a frame on the wire, report ID included."""
        return self.frame_length + 1

    def __repr__(self) -> str:
        return (
            f"CommandDescriptor(report_id=0x{self.report_id:02X}, "
            f"base_offset={self.base_offset}, frame_length={self.frame_length})"
        )


# Mouse and dongle configuration interface
ATK_DESCRIPTOR = CommandDescriptor(report_id=0x08, base_offset=0x05, frame_length=0x10)
