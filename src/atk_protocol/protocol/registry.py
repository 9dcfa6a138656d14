"""Command identifiers and EEPROM register addresses.

Both sets are closed: a raw byte or word from the wire is only accepted if
it is a member of the corresponding enum. The enums are the single lookup
used by every conversion path.
"""

from __future__ import annotations

from enum import IntEnum

from ..exceptions import InvalidCommandId, InvalidEEPROMAddress


class CommandId(IntEnum):
    """Operation codes (byte 0 of a frame)."""

    ZERO = 0x00  # not a real command, used for initialization
    DOWNLOAD_DATA = 0x01
    DOWNLOAD_DRIVER_STATUS = 0x02
    GET_WIRELESS_MOUSE_ONLINE = 0x03
    GET_BATTERY_LEVEL = 0x04
    SET_WIRELESS_DONGLE_PAIR = 0x05
    GET_WIRELESS_DONGLE_PAIR_RESULT = 0x06
    SET_EEPROM = 0x07
    GET_EEPROM = 0x08
    RESTORE_FACTORY = 0x09
    REPORT_MOUSE_STATUS = 0x0A
    RESERVED_1 = 0x0B
    RESERVED_2 = 0x0C
    ENTER_USB_UPGRADE_MODE = 0x0D
    GET_CURRENT_CONFIG = 0x0E
    SET_CURRENT_CONFIG = 0x0F
    GET_MOUSE_CID_MID = 0x10
    RESERVED_3 = 0x11
    GET_MOUSE_VERSION = 0x12
    DONGLE_EXIT_PAIR = 0x13
    SET_4K_RGB_MODE = 0x14
    GET_4K_RGB_MODE = 0x15
    SET_FAR_DISTANCE_MODE = 0x16
    GET_FAR_DISTANCE_MODE = 0x17
    SET_DONGLE_LIGHT_MODE = 0x18
    GET_DONGLE_LIGHT_MODE = 0x19
    REPORT_MOUSE_UPGRADE_ERROR_STATUS = 0x1A
    REPORT_MOUSE_UPGRADE_STATUS = 0x1B


class EEPROMAddress(IntEnum):
    """Configuration registers in the mouse's EEPROM.

    Single-byte settings are followed by a ``*_CRC`` companion register
    holding ``0x55 - value``.
    """

    REPORT_RATE = 0x0000
    REPORT_RATE_CRC = 0x0001
    MAX_DPI = 0x0002
    MAX_DPI_CRC = 0x0003
    CURRENT_DPI = 0x0004
    CURRENT_DPI_CRC = 0x0005
    SILENT_HEIGHT = 0x000A
    SILENT_HEIGHT_CRC = 0x000B

    # DPI profiles and their colors, two profiles per register
    DPI_PAIR_1 = 0x000C
    DPI_PAIR_3 = 0x0014
    DPI_PAIR_5 = 0x001C
    DPI_PAIR_7 = 0x0024
    DPI_PAIR_1_COLOR = 0x002C
    DPI_PAIR_3_COLOR = 0x0034
    DPI_PAIR_5_COLOR = 0x003C
    DPI_PAIR_7_COLOR = 0x0044

    # DPI indicator lighting
    DPI_RGB_LIGHTING_EFFECTS = 0x004C
    DPI_RGB_LIGHTING_EFFECTS_CRC = 0x004D
    DPI_RGB_LONG_BRIGHT_BRIGHTNESS = 0x004E
    DPI_RGB_LONG_BRIGHT_BRIGHTNESS_CRC = 0x004F
    DPI_RGB_LONG_BRIGHT_SPEED = 0x0050
    DPI_RGB_LONG_BRIGHT_SPEED_CRC = 0x0051
    DPI_RGB_ENABLE = 0x0052
    DPI_RGB_ENABLE_CRC = 0x0053

    # Ambient lamp
    ARTICLE_LAMP_R = 0x0054
    ARTICLE_LAMP_G = 0x0055
    ARTICLE_LAMP_B = 0x0056
    ARTICLE_LAMP_CRC = 0x0057
    ARTICLE_LAMP_EFFECTS = 0x0058
    ARTICLE_LAMP_EFFECTS_CRC = 0x0059
    ARTICLE_LAMP_LONG_BRIGHTNESS = 0x005A
    ARTICLE_LAMP_LONG_BRIGHTNESS_CRC = 0x005B
    ARTICLE_LAMP_BREATHING_SPEED = 0x005C
    ARTICLE_LAMP_BREATHING_SPEED_CRC = 0x005D
    ARTICLE_LAMP_ENERGY_SAVING = 0x005E
    ARTICLE_LAMP_ENERGY_SAVING_CRC = 0x005F

    # Key slots, 4 bytes each
    KEY_0 = 0x0060
    KEY_1 = 0x0064
    KEY_2 = 0x0068
    KEY_3 = 0x006C
    KEY_4 = 0x0070
    KEY_5 = 0x0074
    KEY_6 = 0x0078
    KEY_7 = 0x007C
    KEY_8 = 0x0080
    KEY_9 = 0x0084
    KEY_10 = 0x0088
    KEY_11 = 0x008C
    KEY_12 = 0x0090
    KEY_13 = 0x0094
    KEY_14 = 0x0098
    KEY_15 = 0x009C

    # Sensor tuning
    STABILIZATION_TIME = 0x00A9
    STABILIZATION_TIME_CRC = 0x00AA
    MOTION_SYNC = 0x00AB
    MOTION_SYNC_CRC = 0x00AC
    CLOSE_LED_TIME = 0x00AD
    CLOSE_LED_TIME_CRC = 0x00AE
    LINEAR_CORRECTION = 0x00AF
    LINEAR_CORRECTION_CRC = 0x00B0
    RIPPLE_CONTROL = 0x00B1
    RIPPLE_CONTROL_CRC = 0x00B2
    MOVE_CLOSE_LIGHTS = 0x00B3
    MOVE_CLOSE_LIGHTS_CRC = 0x00B4
    SENSOR_ENABLE = 0x00B5
    SENSOR_ENABLE_CRC = 0x00B6
    SENSOR_TIME = 0x00B7
    SENSOR_TIME_CRC = 0x00B8
    SENSOR_MODE = 0x00B9
    SENSOR_MODE_CRC = 0x00BA
    RF_TX_TIME = 0x00BB
    RF_TX_TIME_CRC = 0x00BC

    # Shortcut key slots, 0x20 bytes each
    KEY_SHORTCUTS_0 = 0x0100
    KEY_SHORTCUTS_1 = 0x0120
    KEY_SHORTCUTS_2 = 0x0140
    KEY_SHORTCUTS_3 = 0x0160
    KEY_SHORTCUTS_4 = 0x0180
    KEY_SHORTCUTS_5 = 0x01A0
    KEY_SHORTCUTS_6 = 0x01C0
    KEY_SHORTCUTS_7 = 0x01E0
    KEY_SHORTCUTS_8 = 0x0200
    KEY_SHORTCUTS_9 = 0x0220
    KEY_SHORTCUTS_10 = 0x0240
    KEY_SHORTCUTS_11 = 0x0260
    KEY_SHORTCUTS_12 = 0x0280
    KEY_SHORTCUTS_13 = 0x02A0
    KEY_SHORTCUTS_14 = 0x02C0
    KEY_SHORTCUTS_15 = 0x02E0

    # Macro slots, 0x180 bytes each
    MACRO_0 = 0x0300
    MACRO_1 = 0x0480
    MACRO_2 = 0x0600
    MACRO_3 = 0x0780
    MACRO_4 = 0x0900
    MACRO_5 = 0x0A80
    MACRO_6 = 0x0C00
    MACRO_7 = 0x0D80
    MACRO_8 = 0x0F00
    MACRO_9 = 0x1080
    MACRO_10 = 0x1200
    MACRO_11 = 0x1380
    MACRO_12 = 0x1500
    MACRO_13 = 0x1680
    MACRO_14 = 0x1800
    MACRO_15 = 0x1980


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def to_command_id(value: int) -> CommandId:
    """Convert a raw byte to a :class:`CommandId`.

    Raises:
        InvalidCommandId: If ``value`` is not in 0x00-0x1B.
    """
    if not _is_int(value):
        raise InvalidCommandId(value)
    try:
        return CommandId(value)
    except ValueError:
        raise InvalidCommandId(value) from None


def to_eeprom_address(value: int) -> EEPROMAddress:
    """Convert a raw 16-bit word to an :class:`EEPROMAddress`.

    Raises:
        InvalidEEPROMAddress: If ``value`` is not a known register.
    """
    if not _is_int(value):
        raise InvalidEEPROMAddress(value)
    try:
        return EEPROMAddress(value)
    except ValueError:
        raise InvalidEEPROMAddress(value) from None
