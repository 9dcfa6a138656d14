"""Helpers for constructing commands in one expression."""

from __future__ import annotations

from .command import Command
from .descriptor import ATK_DESCRIPTOR, CommandDescriptor
from .registry import CommandId, EEPROMAddress


class CommandBuilder:
    """Fluent construction of a :class:`Command`.

    Each step is validated immediately, so a bad value raises at the call
    that introduced it::

        cmd = (
            CommandBuilder()
            .command_id(CommandId.SET_EEPROM)
            .eeprom_address(EEPROMAddress.REPORT_RATE)
            .data_len(2)
            .paired_byte(0x01, 0)
            .build()
        )
    """

    def __init__(
        self,
        descriptor: CommandDescriptor = ATK_DESCRIPTOR,
        command: Command | None = None,
    ) -> None:
        # an existing command keeps its own descriptor
        self._command = command.copy() if command is not None else Command(descriptor)

    def command_id(self, command_id: CommandId | int) -> CommandBuilder:
        self._command.set_command_id(command_id)
        return self

    def status(self, status: int) -> CommandBuilder:
        self._command.set_status(status)
        return self

    def eeprom_address(self, address: EEPROMAddress | int) -> CommandBuilder:
        self._command.set_eeprom_address(address)
        return self

    def data_len(self, length: int) -> CommandBuilder:
        self._command.set_data_len(length)
        return self

    def data(self, data: bytes, offset: int = 0) -> CommandBuilder:
        """Write ``data`` at ``offset``, growing ``data_len`` to fit."""
        end = offset + len(data)
        if end > self._command.data_len:
            self._command.set_data_len(end)
        self._command.set_data(data, offset)
        return self

    def byte(self, value: int, offset: int) -> CommandBuilder:
        self._command.set_data_byte(value, offset)
        return self

    def paired_byte(self, value: int, offset: int) -> CommandBuilder:
        self._command.set_data_byte_with_checksum(value, offset)
        return self

    def build(self) -> Command:
        """Return the finished command. The builder can keep being used."""
        return self._command.copy()


def build_command(
    command_id: CommandId | int,
    data: bytes = b"",
    *,
    status: int = 0,
    eeprom_address: EEPROMAddress | int = EEPROMAddress.REPORT_RATE,
    descriptor: CommandDescriptor = ATK_DESCRIPTOR,
) -> Command:
    """Build a command whose ``data_len`` equals ``len(data)``.

    Raises:
        DataTooLarge: ``data`` does not fit in one frame.
    """
    return (
        CommandBuilder(descriptor)
        .command_id(command_id)
        .status(status)
        .eeprom_address(eeprom_address)
        .data(data)
        .build()
    )
