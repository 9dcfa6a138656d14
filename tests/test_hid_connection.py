"""Tests for the HID connection, using stand-ins for the hidapi and pyusb modules."""

import sys
import types

import pytest

from atk_protocol.transport.hid_connection import (
    HID_SET_REPORT,
    REQUEST_TYPE_CLASS_INTERFACE_OUT,
    HIDConnection,
    find_device,
)

VID = 0x3554
PID = 0xF58A


def hid_entry(path, usage_page, usage, interface_number=1):
    return {
        "path": path,
        "vendor_id": VID,
        "product_id": PID,
        "usage_page": usage_page,
        "usage": usage,
        "manufacturer_string": "ATK",
        "product_string": "ATK Mouse",
        "serial_number": "A1",
        "interface_number": interface_number,
    }


class FakeHidDevice:
    def __init__(self):
        self.opened_path = None
        self.nonblocking = None
        self.written = []
        self.reports = []
        self.closed = False
        self.write_result = None

    def open_path(self, path):
        self.opened_path = path

    def set_nonblocking(self, value):
        self.nonblocking = value

    def write(self, data):
        self.written.append(bytes(data))
        return len(data) if self.write_result is None else self.write_result

    def read(self, size, timeout_ms=0):
        if not self.reports:
            return []
        return self.reports.pop(0)[:size]

    def error(self):
        return "write error"

    def close(self):
        self.closed = True


@pytest.fixture
def fake_hid(monkeypatch):
    created = []

    def device():
        dev = FakeHidDevice()
        created.append(dev)
        return dev

    module = types.SimpleNamespace(
        entries=[
            hid_entry(b"/dev/hidraw0", 0x0001, 0x0002, interface_number=0),
            hid_entry(b"/dev/hidraw1", 0xFF02, 0x0002),
        ],
        created=created,
        device=device,
    )
    module.enumerate = lambda vid=0, pid=0: [
        e for e in module.entries if e["vendor_id"] == vid and e["product_id"] == pid
    ]
    monkeypatch.setitem(sys.modules, "hid", module)
    return module


@pytest.fixture
def fake_usb(monkeypatch):
    """pyusb stand-in with no device attached."""

    class USBTimeoutError(Exception):
        pass

    core = types.SimpleNamespace(find=lambda **kw: None, USBTimeoutError=USBTimeoutError)
    util = types.SimpleNamespace(released=[])
    usb = types.SimpleNamespace(core=core, util=util)
    monkeypatch.setitem(sys.modules, "usb", usb)
    monkeypatch.setitem(sys.modules, "usb.core", core)
    monkeypatch.setitem(sys.modules, "usb.util", util)
    return usb


# ── Enumeration ───────────────────────────────────────────────────────


def test_find_device_by_usage(fake_hid):
    """Usage page and usage select the matching interface."""
    info = find_device(VID, PID, 0xFF02, 0x0002)
    assert info.path == "/dev/hidraw1"
    assert info.usage_page == 0xFF02
    assert info.product == "ATK Mouse"
    assert info.interface_number == 1


def test_find_device_without_usage_takes_first(fake_hid):
    """Without usage filters the first enumerated device is returned."""
    assert find_device(VID, PID).path == "/dev/hidraw0"


def test_find_device_no_match(fake_hid):
    """No matching interface must raise ConnectionError."""
    with pytest.raises(ConnectionError):
        find_device(VID, PID, 0xFF00, 0x0001)


# ── hidapi backend ────────────────────────────────────────────────────


def test_open_hidapi(fake_hid):
    """Open uses hidapi in blocking mode on the matched path."""
    conn = HIDConnection(VID, PID, usage_page=0xFF02, usage=0x0002)
    info = conn.open()

    assert conn.connected
    assert conn.backend == "hidapi"
    assert info.path == "/dev/hidraw1"
    dev = fake_hid.created[0]
    assert dev.opened_path == b"/dev/hidraw1"
    assert dev.nonblocking is False


def test_write_and_read_hidapi(fake_hid):
    """hidapi writes pass through and an empty read returns None."""
    conn = HIDConnection(VID, PID, 0xFF02, 0x0002)
    conn.open()
    dev = fake_hid.created[0]
    dev.reports.append([0x08, 0x04, 0x00])

    assert conn.write(b"\x08\x04") == 2
    assert dev.written == [b"\x08\x04"]
    assert conn.read(64) == b"\x08\x04\x00"
    assert conn.read(64) is None


def test_write_failure_hidapi(fake_hid):
    """A negative hidapi write count must raise OSError."""
    conn = HIDConnection(VID, PID, 0xFF02, 0x0002)
    conn.open()
    fake_hid.created[0].write_result = -1
    with pytest.raises(OSError):
        conn.write(b"\x08\x00")


def test_write_empty_report(fake_hid):
    """An empty report must be rejected."""
    conn = HIDConnection(VID, PID)
    conn.open()
    with pytest.raises(ValueError):
        conn.write(b"")


def test_context_manager_closes(fake_hid):
    """Leaving the with block closes the handle."""
    with HIDConnection(VID, PID, 0xFF02, 0x0002) as conn:
        assert conn.connected
    assert not conn.connected
    assert fake_hid.created[0].closed


def test_open_is_idempotent(fake_hid):
    """Opening twice must not open a second handle."""
    conn = HIDConnection(VID, PID)
    conn.open()
    conn.open()
    assert len(fake_hid.created) == 1


# ── Not connected ─────────────────────────────────────────────────────


def test_write_requires_connection():
    """Write before open must raise ConnectionError."""
    with pytest.raises(ConnectionError):
        HIDConnection(VID, PID).write(b"\x08")


def test_read_requires_connection():
    """Read before open must raise ConnectionError."""
    with pytest.raises(ConnectionError):
        HIDConnection(VID, PID).read()


def test_close_when_not_connected_is_noop():
    """Closing an unopened connection does nothing."""
    HIDConnection(VID, PID).close()


def test_open_fails_on_both_backends(fake_hid, fake_usb):
    """The final error names the vendor and product ids."""
    fake_hid.entries = []
    with pytest.raises(ConnectionError) as exc:
        HIDConnection(VID, PID, 0xFF02, 0x0002).open()
    assert "0x3554:0xf58a" in str(exc.value)


# ── pyusb backend ─────────────────────────────────────────────────────


class FakeEndpoint:
    def __init__(self, address):
        self.bEndpointAddress = address


class FakeUsbDevice:
    iManufacturer = 1
    iProduct = 2
    iSerialNumber = 3
    bus = 1
    address = 7

    def __init__(self):
        self.detached = []
        self.attached = []
        self.config_error = None
        self.endpoints = [FakeEndpoint(0x02), FakeEndpoint(0x82)]
        self.transfers = []
        self.reports = []

    def is_kernel_driver_active(self, interface):
        return True

    def detach_kernel_driver(self, interface):
        self.detached.append(interface)

    def attach_kernel_driver(self, interface):
        self.attached.append(interface)

    def get_active_configuration(self):
        if self.config_error is not None:
            raise self.config_error
        return {(1, 0): self.endpoints}

    def ctrl_transfer(self, request_type, request, value, index, data, timeout=None):
        self.transfers.append((request_type, request, value, index, bytes(data)))
        return len(data)

    def read(self, endpoint, size, timeout=None):
        if not self.reports:
            raise sys.modules["usb.core"].USBTimeoutError("timeout")
        return self.reports.pop(0)


@pytest.fixture
def pyusb_device(fake_hid, fake_usb):
    fake_hid.entries = []
    dev = FakeUsbDevice()
    fake_usb.core.find = lambda **kw: dev
    util = fake_usb.util
    util.ENDPOINT_IN = 0x80
    util.endpoint_direction = lambda address: address & 0x80
    util.claim_interface = lambda d, i: None
    util.release_interface = lambda d, i: util.released.append(i)
    util.dispose_resources = lambda d: None
    util.get_string = lambda d, index: {1: "ATK", 2: "ATK Dongle", 3: "B2"}[index]

    def find_descriptor(intf, custom_match):
        return next((e for e in intf if custom_match(e)), None)

    util.find_descriptor = find_descriptor
    return dev


def test_open_pyusb_fallback(pyusb_device):
    """pyusb is used when hidapi finds nothing."""
    conn = HIDConnection(VID, PID, interface=1)
    info = conn.open()

    assert conn.backend == "pyusb"
    assert info.product == "ATK Dongle"
    assert info.path == "usb:1:7"
    assert pyusb_device.detached == [1]


def test_pyusb_write_uses_set_report(pyusb_device):
    """pyusb writes must use a HID SET_REPORT control transfer."""
    conn = HIDConnection(VID, PID, interface=1)
    conn.open()

    assert conn.write(b"\x08\x04\x00") == 3
    request_type, request, value, index, data = pyusb_device.transfers[0]
    assert request_type == REQUEST_TYPE_CLASS_INTERFACE_OUT
    assert request == HID_SET_REPORT
    assert value == 0x0208
    assert index == 1
    assert data == b"\x08\x04\x00"


def test_pyusb_read_timeout_returns_none(pyusb_device):
    """A pyusb read timeout returns None."""
    conn = HIDConnection(VID, PID, interface=1)
    conn.open()
    pyusb_device.reports.append([0x08, 0x01])

    assert conn.read(64) == b"\x08\x01"
    assert conn.read(64) is None


def test_pyusb_close_releases_interface(pyusb_device, fake_usb):
    """Close must release the claimed interface."""
    conn = HIDConnection(VID, PID, interface=1)
    conn.open()
    conn.close()
    assert fake_usb.util.released == [1]
    assert not conn.connected


def test_pyusb_refused_when_usage_requested(pyusb_device, fake_usb):
    """pyusb cannot match a usage, so a usage-filtered open must fail."""
    with pytest.raises(ConnectionError):
        HIDConnection(VID, PID, usage_page=0xFF02, usage=0x0002).open()
    assert pyusb_device.detached == []
    assert fake_usb.util.released == []


def test_pyusb_open_failure_releases_interface(pyusb_device, fake_usb):
    """A failure after claiming must release the interface and reattach the driver."""
    pyusb_device.config_error = OSError("configuration unavailable")
    conn = HIDConnection(VID, PID, interface=1)
    with pytest.raises(ConnectionError):
        conn.open()
    assert fake_usb.util.released == [1]
    assert pyusb_device.attached == [1]
    assert not conn.connected


def test_pyusb_missing_in_endpoint_releases_interface(pyusb_device, fake_usb):
    """An interface without an IN endpoint is released and handed back to the kernel."""
    pyusb_device.endpoints = [FakeEndpoint(0x02)]
    with pytest.raises(ConnectionError) as exc:
        HIDConnection(VID, PID, interface=1).open()
    assert "no interrupt IN endpoint" in str(exc.value)
    assert fake_usb.util.released == [1]
    assert pyusb_device.attached == [1]
