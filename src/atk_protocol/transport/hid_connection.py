"""HID connection to the mouse or its wireless dongle.

Supports both ``hidapi`` (preferred) and ``pyusb`` backends. With hidapi the
device is selected by vendor id, product id and, optionally, HID usage page
and usage. The pyusb backend matches on vendor and product id only and is
not used when a usage page or usage is given. It claims a single interface,
writes with a HID SET_REPORT control transfer and reads from the interface's
interrupt IN endpoint.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

READ_TIMEOUT_MS = 1000
MAX_REPORT_LENGTH = 64
DEFAULT_INTERFACE = 1

# HID class request used by the pyusb backend
HID_SET_REPORT = 0x09
HID_REPORT_TYPE_OUTPUT = 0x02
REQUEST_TYPE_CLASS_INTERFACE_OUT = 0x21


@dataclass
class DeviceInfo:
    """Basic device identification from the HID enumeration."""

    vendor_id: int
    product_id: int
    usage_page: int | None = None
    usage: int | None = None
    manufacturer: str = ""
    product: str = ""
    serial: str = ""
    path: str = ""
    interface_number: int = -1

    def __str__(self) -> str:
        return (
            f"Device: {self.product}\n"
            f"Manufacturer: {self.manufacturer}\n"
            f"Serial Number: {self.serial}\n"
            f"Path: {self.path}"
        )


def _decode_path(path) -> str:
    return path.decode() if isinstance(path, bytes) else str(path)


def find_device(
    vendor_id: int,
    product_id: int,
    usage_page: int | None = None,
    usage: int | None = None,
) -> DeviceInfo:
    """Return the first hidapi device matching all given identifiers.

    Raises:
        ConnectionError: If no device matches.
    """
    import hid

    for item in hid.enumerate(vendor_id, product_id):
        if usage_page is not None and item.get("usage_page") != usage_page:
            continue
        if usage is not None and item.get("usage") != usage:
            continue
        return DeviceInfo(
            vendor_id=item["vendor_id"],
            product_id=item["product_id"],
            usage_page=item.get("usage_page"),
            usage=item.get("usage"),
            manufacturer=item.get("manufacturer_string") or "",
            product=item.get("product_string") or "",
            serial=item.get("serial_number") or "",
            path=_decode_path(item["path"]),
            interface_number=item.get("interface_number", -1),
        )

    raise ConnectionError(
        f"Device not found: vendor_id={vendor_id:#06x} product_id={product_id:#06x} "
        f"usage_page={usage_page} usage={usage}"
    )


class HIDConnection:
    """Owns the HID handle of one device.

    Usage::

        with HIDConnection(vendor_id, product_id, usage_page, usage) as conn:
            conn.write(report)
            response = conn.read(64)

    The handle is not shared; callers that use one device from several
    threads must serialize access themselves.
    """

    def __init__(
        self,
        vendor_id: int,
        product_id: int,
        usage_page: int | None = None,
        usage: int | None = None,
        interface: int = DEFAULT_INTERFACE,
        timeout_ms: int = READ_TIMEOUT_MS,
    ) -> None:
        self._vendor_id = vendor_id
        self._product_id = product_id
        self._usage_page = usage_page
        self._usage = usage
        self._interface = interface
        self._timeout_ms = timeout_ms
        self._device = None
        self._ep_in = None
        self._backend: str = ""
        self._connected = False
        self._device_info = DeviceInfo(
            vendor_id=vendor_id,
            product_id=product_id,
            usage_page=usage_page,
            usage=usage,
        )

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def backend(self) -> str:
        return self._backend

    @property
    def device_info(self) -> DeviceInfo:
        return self._device_info

    def __enter__(self) -> HIDConnection:
        self.open()
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def open(self) -> DeviceInfo:
        """Open the device, trying hidapi first, then pyusb.

        Raises:
            ConnectionError: If the device cannot be found or opened.
        """
        if self._connected:
            return self._device_info

        try:
            return self._open_hidapi()
        except Exception as e:
            logger.debug("hidapi backend failed: %s, trying pyusb", e)

        try:
            return self._open_pyusb()
        except Exception as e:
            raise ConnectionError(
                f"Could not connect to device "
                f"({self._vendor_id:#06x}:{self._product_id:#06x}). "
                f"Ensure the device is connected and you have permissions. "
                f"Last error: {e}"
            ) from e

    def _open_hidapi(self) -> DeviceInfo:
        """Open using the hidapi library."""
        import hid

        info = find_device(
            self._vendor_id, self._product_id, self._usage_page, self._usage
        )
        device = hid.device()
        device.open_path(info.path.encode())
        device.set_nonblocking(False)

        self._device = device
        self._backend = "hidapi"
        self._connected = True
        self._device_info = info

        logger.info(
            "Connected via hidapi: %s %s (%s)",
            info.manufacturer,
            info.product,
            info.path,
        )
        return info

    def _open_pyusb(self) -> DeviceInfo:
        """Open using pyusb + libusb.

        pyusb cannot see HID usages, so this backend is refused when a usage
        page or usage was requested.
        """
        if self._usage_page is not None or self._usage is not None:
            raise ConnectionError("pyusb backend cannot select by HID usage")

        import usb.core
        import usb.util

        dev = usb.core.find(idVendor=self._vendor_id, idProduct=self._product_id)
        if dev is None:
            raise ConnectionError("Device not found via pyusb")

        reattach = False
        if dev.is_kernel_driver_active(self._interface):
            dev.detach_kernel_driver(self._interface)
            reattach = True

        usb.util.claim_interface(dev, self._interface)

        try:
            intf = dev.get_active_configuration()[(self._interface, 0)]
            ep_in = usb.util.find_descriptor(
                intf,
                custom_match=lambda e: usb.util.endpoint_direction(e.bEndpointAddress)
                == usb.util.ENDPOINT_IN,
            )
            if ep_in is None:
                raise ConnectionError(
                    f"Interface {self._interface} has no interrupt IN endpoint"
                )
        except Exception:
            usb.util.release_interface(dev, self._interface)
            if reattach:
                dev.attach_kernel_driver(self._interface)
            raise

        self._device = dev
        self._ep_in = ep_in.bEndpointAddress
        self._backend = "pyusb"
        self._connected = True
        self._device_info = DeviceInfo(
            vendor_id=self._vendor_id,
            product_id=self._product_id,
            usage_page=self._usage_page,
            usage=self._usage,
            manufacturer=usb.util.get_string(dev, dev.iManufacturer) or "",
            product=usb.util.get_string(dev, dev.iProduct) or "",
            serial=usb.util.get_string(dev, dev.iSerialNumber) or "",
            path=f"usb:{dev.bus}:{dev.address}",
            interface_number=self._interface,
        )

        logger.info(
            "Connected via pyusb: %s %s",
            self._device_info.manufacturer,
            self._device_info.product,
        )
        return self._device_info

    def close(self) -> None:
        """Close the connection."""
        if not self._connected:
            return

        try:
            if self._backend == "hidapi":
                self._device.close()
            elif self._backend == "pyusb":
                import usb.util
                usb.util.release_interface(self._device, self._interface)
                usb.util.dispose_resources(self._device)
        except Exception as e:
            logger.warning("Error closing device: %s", e)
        finally:
            self._device = None
            self._ep_in = None
            self._connected = False
            logger.info("Disconnected")

    def write(self, data: bytes) -> int:
        """Write one output report. ``data[0]`` is the report ID.

        Returns:
            Number of bytes written.

        Raises:
            ConnectionError: If not connected.
            OSError: If the write fails.
        """
        if not self._connected:
            raise ConnectionError("Not connected to device")
        if not data:
            raise ValueError("Report must contain at least the report ID")

        if self._backend == "hidapi":
            written = self._device.write(data)
            if written < 0:
                raise OSError(f"hidapi write failed: {self._device.error()}")
            return written
        elif self._backend == "pyusb":
            w_value = (HID_REPORT_TYPE_OUTPUT << 8) | data[0]
            return self._device.ctrl_transfer(
                REQUEST_TYPE_CLASS_INTERFACE_OUT,
                HID_SET_REPORT,
                w_value,
                self._interface,
                data,
                timeout=self._timeout_ms,
            )
        else:
            raise RuntimeError(f"Unknown backend: {self._backend}")

    def read(
        self,
        size: int = MAX_REPORT_LENGTH,
        timeout_ms: int | None = None,
    ) -> bytes | None:
        """Read one input report, report ID included.

        Returns:
            The report, or None if the read timed out.

        Raises:
            ConnectionError: If not connected.
            OSError: If the read fails.
        """
        if not self._connected:
            raise ConnectionError("Not connected to device")
        if timeout_ms is None:
            timeout_ms = self._timeout_ms

        if self._backend == "hidapi":
            data = self._device.read(size, timeout_ms)
            if data:
                return bytes(data)
            return None
        elif self._backend == "pyusb":
            import usb.core
            try:
                data = self._device.read(self._ep_in, size, timeout=timeout_ms)
            except usb.core.USBTimeoutError:
                logger.debug("Read timed out after %d ms", timeout_ms)
                return None
            return bytes(data)
        else:
            raise RuntimeError(f"Unknown backend: {self._backend}")
