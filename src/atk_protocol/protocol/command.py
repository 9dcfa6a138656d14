"""The command frame codec.

A :class:`Command` holds the fields of one request or response frame and
keeps its checksum consistent with them: every mutator validates its input
first, then writes, then recomputes the checksum. Nothing is written when a
mutator raises.

Checksum::

    sum      = report_id + command_id + status + eeprom_address + data_len + sum(data)
    checksum = (0x55 - sum) & 0xFF

so that ``(sum + checksum) & 0xFF == 0x55`` for every valid frame.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..exceptions import (
    ChecksumMismatch,
    DataTooLarge,
    InvalidBufferLength,
    InvalidDataLength,
    InvalidOffset,
    OffsetNotAligned,
)
from ..utils.checksum import calc_checksum, paired_checksum
from .descriptor import ATK_DESCRIPTOR, CommandDescriptor
from .registry import CommandId, EEPROMAddress, to_command_id, to_eeprom_address

if TYPE_CHECKING:
    from ..transport.device import Device


def _check_byte(name: str, value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 0xFF:
        raise ValueError(f"{name} must be 0-255, got {value!r}")
    return value


class Command:
    """One fixed-length command frame.

    Usage::

        cmd = Command()
        cmd.set_command_id(CommandId.SET_EEPROM)
        cmd.set_eeprom_address(EEPROMAddress.CURRENT_DPI)
        cmd.set_data_len(2)
        cmd.set_data_byte_with_checksum(0x03, 0)
        raw = cmd.to_bytes()
    """

    __hash__ = None  # mutable

    def __init__(self, descriptor: CommandDescriptor = ATK_DESCRIPTOR) -> None:
        self._descriptor = descriptor
        self._command_id = CommandId.ZERO
        self._status = 0
        self._eeprom_address = EEPROMAddress.REPORT_RATE
        self._data_len = 0
        self._data = bytearray(descriptor.capacity)
        self._checksum = 0
        self._update_checksum()

    # ── Parsing / serialization ───────────────────────────────────────

    @classmethod
    def from_bytes(
        cls,
        raw: bytes,
        descriptor: CommandDescriptor = ATK_DESCRIPTOR,
        *,
        strict: bool = False,
    ) -> Command:
        """Parse a frame (without its report ID).

        Args:
            raw: Exactly ``descriptor.frame_length`` bytes.
            descriptor: Layout of the frame.
            strict: Also require the received checksum to match the fields.

        Raises:
            InvalidBufferLength: Wrong number of bytes.
            InvalidCommandId: Unknown command id.
            InvalidEEPROMAddress: Address not in the register map.
            DataTooLarge: Length byte exceeds the payload capacity.
            ChecksumMismatch: ``strict`` is set and the checksum is wrong.
        """
        raw = bytes(raw)
        if len(raw) != descriptor.frame_length:
            raise InvalidBufferLength(descriptor.frame_length, len(raw))

        command_id = to_command_id(raw[0])
        eeprom_address = to_eeprom_address(int.from_bytes(raw[2:4], "big"))
        data_len = raw[4]
        if data_len > descriptor.capacity:
            raise DataTooLarge(data_len, descriptor.capacity)

        cmd = cls(descriptor)
        cmd._command_id = command_id
        cmd._status = raw[1]
        cmd._eeprom_address = eeprom_address
        cmd._data_len = data_len
        start = descriptor.base_offset
        cmd._data[:data_len] = raw[start : start + data_len]
        cmd._checksum = raw[descriptor.checksum_offset]

        if strict:
            expected = cmd._compute_checksum()
            if expected != cmd._checksum:
                raise ChecksumMismatch(expected, cmd._checksum)
        return cmd

    def to_bytes(self) -> bytes:
        """Serialize to ``frame_length`` bytes, zero-padding unused data."""
        d = self._descriptor
        buf = bytearray(d.frame_length)
        buf[0] = self._command_id
        buf[1] = self._status
        buf[2:4] = int(self._eeprom_address).to_bytes(2, "big")
        buf[4] = self._data_len
        buf[d.base_offset : d.base_offset + self._data_len] = self._data[: self._data_len]
        buf[d.checksum_offset] = self._checksum
        return bytes(buf)

    def __bytes__(self) -> bytes:
        return self.to_bytes()

    def copy(self) -> Command:
        """Return an independent copy of this command."""
        other = Command(self._descriptor)
        other._command_id = self._command_id
        other._status = self._status
        other._eeprom_address = self._eeprom_address
        other._data_len = self._data_len
        other._data[:] = self._data
        other._checksum = self._checksum
        return other

    def execute(self, device: Device, *, strict: bool = False) -> Command:
        """Send this command through ``device`` and return the parsed response."""
        return device.execute(self, strict=strict)

    # ── Accessors ─────────────────────────────────────────────────────

    @property
    def descriptor(self) -> CommandDescriptor:
        return self._descriptor

    @property
    def command_id(self) -> CommandId:
        return self._command_id

    @property
    def status(self) -> int:
        return self._status

    @property
    def eeprom_address(self) -> EEPROMAddress:
        return self._eeprom_address

    @property
    def data_len(self) -> int:
        return self._data_len

    @property
    def data(self) -> bytes:
        """The valid part of the payload (``data_len`` bytes)."""
        return bytes(self._data[: self._data_len])

    @property
    def payload(self) -> bytes:
        """The whole payload buffer, zero padding included."""
        return bytes(self._data)

    @property
    def checksum(self) -> int:
        return self._checksum

    def verify_checksum(self) -> bool:
        """Return True if the stored checksum matches the other fields.

        Always true for commands built locally. A parsed response keeps the
        byte the device sent, which may disagree.
        """
        return self._checksum == self._compute_checksum()

    # ── Mutators ──────────────────────────────────────────────────────

    def set_command_id(self, command_id: CommandId | int) -> None:
        self._command_id = to_command_id(command_id)
        self._update_checksum()

    def set_status(self, status: int) -> None:
        self._status = _check_byte("Status", status)
        self._update_checksum()

    def set_eeprom_address(self, address: EEPROMAddress | int) -> None:
        self._eeprom_address = to_eeprom_address(address)
        self._update_checksum()

    def set_data_len(self, length: int) -> None:
        """Set the number of valid data bytes.

        Bytes past a reduced length are cleared.

        Raises:
            DataTooLarge: ``length`` exceeds the payload capacity.
        """
        if isinstance(length, bool) or not isinstance(length, int) or length < 0:
            raise ValueError(f"Data length must be a non-negative int, got {length!r}")
        capacity = self._descriptor.capacity
        if length > capacity:
            raise DataTooLarge(length, capacity)
        if length < self._data_len:
            self._data[length:] = bytes(capacity - length)
        self._data_len = length
        self._update_checksum()

    def set_data(self, data: bytes, offset: int = 0) -> None:
        """Copy ``data`` into the payload at ``offset``.

        The write must fit inside the current ``data_len``; grow it first
        with :meth:`set_data_len`.

        Raises:
            InvalidOffset: Negative offset.
            InvalidDataLength: ``offset + len(data)`` exceeds ``data_len``.
        """
        data = bytes(data)
        if offset < 0:
            raise InvalidOffset(offset)
        if offset + len(data) > self._data_len:
            raise InvalidDataLength(offset, len(data), self._data_len)
        self._data[offset : offset + len(data)] = data
        self._update_checksum()

    def set_data_byte(self, value: int, offset: int) -> None:
        """Write one payload byte.

        Raises:
            InvalidOffset: ``offset`` is outside ``0..data_len-1``.
        """
        if not 0 <= offset < self._data_len:
            raise InvalidOffset(offset)
        self._data[offset] = _check_byte("Value", value)
        self._update_checksum()

    def set_data_byte_with_checksum(self, value: int, offset: int) -> None:
        """Write ``value`` at an even offset and ``0x55 - value`` after it.

        Raises:
            OffsetNotAligned: ``offset`` is odd.
            InvalidOffset: Either byte falls outside ``data_len``.
        """
        if offset % 2 != 0:
            raise OffsetNotAligned(offset)
        if not 0 <= offset < self._data_len:
            raise InvalidOffset(offset)
        if offset + 1 >= self._data_len:
            raise InvalidOffset(offset + 1)
        _check_byte("Value", value)

        self.set_data_byte(value, offset)
        self.set_data_byte(paired_checksum(value), offset + 1)

    # ── Internals ─────────────────────────────────────────────────────

    def _compute_checksum(self) -> int:
        return calc_checksum(
            (
                self._descriptor.report_id,
                self._command_id,
                self._status,
                self._eeprom_address,
                self._data_len,
                *self._data,
            )
        )

    def _update_checksum(self) -> None:
        self._checksum = self._compute_checksum()

    # ── Dunder ────────────────────────────────────────────────────────

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Command):
            return NotImplemented
        return (
            self._descriptor == other._descriptor
            and self.to_bytes() == other.to_bytes()
        )

    def __repr__(self) -> str:
        return (
            f"Command(id={self._command_id.name}, status=0x{self._status:02X}, "
            f"address={self._eeprom_address.name}, "
            f"data={self.data.hex(' ') if self._data_len else '(empty)'}, "
            f"checksum=0x{self._checksum:02X})"
        )

    def __str__(self) -> str:
        return (
            f"ID: {self._command_id.name} (0x{self._command_id:02X})\n"
            f"Status: 0x{self._status:02X}\n"
            f"Address: {self._eeprom_address.name} (0x{self._eeprom_address:04X})\n"
            f"Data Length: {self._data_len}\n"
            f"Data: {self.data.hex(' ')}\n"
            f"Checksum: 0x{self._checksum:02X}"
        )
