"""Transport layer: HID connection and the command-level device adapter."""

from .hid_connection import DeviceInfo, HIDConnection, find_device
from .device import Connection, Device
