"""Command protocol for ATK gaming mice and their wireless dongles."""

from .exceptions import (
    AtkError,
    ChecksumMismatch,
    CommandError,
    DataTooLarge,
    InvalidBufferLength,
    InvalidCommandId,
    InvalidDataLength,
    InvalidEEPROMAddress,
    InvalidOffset,
    OffsetNotAligned,
    ParseError,
    TransportError,
)
from .protocol import (
    ATK_DESCRIPTOR,
    Command,
    CommandBuilder,
    CommandDescriptor,
    CommandId,
    EEPROMAddress,
    build_command,
)
from .transport import Device, DeviceInfo, HIDConnection, find_device

__version__ = "0.1.0"
