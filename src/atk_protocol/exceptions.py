"""Exception types raised by the codec and the transport adapter."""

from __future__ import annotations


class AtkError(Exception):
    """Base class for all protocol errors."""


class CommandError(AtkError):
    """A command field or buffer violates the frame layout."""


class InvalidBufferLength(CommandError):
    """A raw frame does not have the descriptor's frame length."""

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Invalid buffer length: expected {expected}, got {actual}"
        )


class InvalidCommandId(CommandError):
    """A command id outside 0x00-0x1B."""

    def __init__(self, value) -> None:
        self.value = value
        super().__init__(f"Invalid command id: {value!r}")


class InvalidEEPROMAddress(CommandError):
    """An EEPROM address that is not a known register."""

    def __init__(self, value) -> None:
        self.value = value
        text = f"0x{value:04X}" if isinstance(value, int) else repr(value)
        super().__init__(f"Invalid EEPROM address: {text}")


class DataTooLarge(CommandError):
    """A data length larger than the payload capacity."""

    def __init__(self, length: int, capacity: int) -> None:
        self.length = length
        self.capacity = capacity
        super().__init__(
            f"Data length {length} is larger than the maximum of {capacity}"
        )


class InvalidDataLength(CommandError):
    """A data write that would run past the current valid length."""

    def __init__(self, offset: int, length: int, allowed: int) -> None:
        self.offset = offset
        self.length = length
        self.allowed = allowed
        super().__init__(
            f"Invalid data length: tried to write {length} bytes at offset "
            f"{offset}, only {allowed} valid bytes"
        )


class InvalidOffset(CommandError):
    """A single-byte write outside the valid data window."""

    def __init__(self, offset: int) -> None:
        self.offset = offset
        super().__init__(f"Invalid offset: {offset}")


class OffsetNotAligned(CommandError):
    """A paired-checksum write at an odd offset."""

    def __init__(self, offset: int) -> None:
        self.offset = offset
        super().__init__(
            f"Offset is not aligned to a byte pair boundary: {offset}"
        )


class ChecksumMismatch(CommandError):
    """A received frame whose checksum does not match its fields."""

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Checksum mismatch: expected 0x{expected:02X}, got 0x{actual:02X}"
        )


class TransportError(AtkError):
    """The underlying HID connection failed to write or read."""


class ParseError(AtkError):
    """A device response could not be parsed as a command."""

    def __init__(self, cause: CommandError) -> None:
        self.cause = cause
        super().__init__(f"Failed to convert response to command: {cause}")


__all__ = [
    "AtkError",
    "CommandError",
    "InvalidBufferLength",
    "InvalidCommandId",
    "InvalidEEPROMAddress",
    "DataTooLarge",
    "InvalidDataLength",
    "InvalidOffset",
    "OffsetNotAligned",
    "ChecksumMismatch",
    "TransportError",
    "ParseError",
]
