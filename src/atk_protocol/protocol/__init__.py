"""Protocol layer: registers, descriptors, the command codec and builders."""

from .registry import CommandId, EEPROMAddress, to_command_id, to_eeprom_address
from .descriptor import ATK_DESCRIPTOR, CommandDescriptor
from .command import Command
from .builders import CommandBuilder, build_command
