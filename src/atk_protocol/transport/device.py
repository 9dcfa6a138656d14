"""Sends commands to a device and parses its responses.

Each exchange is independent: the protocol has no sequence numbers, so only
one request may be outstanding at a time. :meth:`Device.execute` sends a
command and blocks until the response arrives or the connection's read
timeout expires.
"""

from __future__ import annotations

import logging
from typing import Protocol

from ..exceptions import CommandError, ParseError, TransportError
from ..protocol.command import Command
from .hid_connection import MAX_REPORT_LENGTH

logger = logging.getLogger(__name__)


class Connection(Protocol):
    """What :class:`Device` needs from a transport."""

    def write(self, data: bytes) -> int: ...

    def read(self, size: int = ..., timeout_ms: int | None = None) -> bytes | None: ...


class Device:
    """Command-level wrapper around a raw report connection.

    Usage::

        with HIDConnection(vendor_id, product_id, usage_page, usage) as conn:
            device = Device(conn)
            response = device.execute(build_command(CommandId.GET_BATTERY_LEVEL))
            print(response.status, response.data)
    """

    def __init__(
        self,
        connection: Connection,
        report_length: int = MAX_REPORT_LENGTH,
    ) -> None:
        self._connection = connection
        self._report_length = report_length

    @property
    def connection(self) -> Connection:
        return self._connection

    def send(self, command: Command) -> int:
        """Write ``command`` prefixed with its descriptor's report ID.

        Returns:
            Number of bytes written.

        Raises:
            TransportError: If the connection fails.
        """
        report = bytes([command.descriptor.report_id]) + command.to_bytes()
        logger.debug("TX %s", report.hex(" "))
        try:
            return self._connection.write(report)
        except OSError as e:
            raise TransportError(f"Failed to send command: {e}") from e

    def read(self) -> bytes:
        """Read one report and return it without its leading report ID.

        Raises:
            TransportError: If the read fails or times out.
        """
        try:
            report = self._connection.read(self._report_length)
        except OSError as e:
            raise TransportError(f"Failed to read response: {e}") from e
        if report is None:
            raise TransportError("Timed out waiting for a response")

        report = bytes(report)
        logger.debug("RX %s", report.hex(" "))
        return report[1:]

    def execute(self, command: Command, *, strict: bool = False) -> Command:
        """Send ``command`` and parse the response with the same descriptor.

        Args:
            command: The request.
            strict: Reject responses whose checksum does not match.

        Raises:
            TransportError: If sending or reading fails.
            ParseError: If the response is not a valid frame.
        """
        self.send(command)
        response = self.read()
        try:
            return Command.from_bytes(response, command.descriptor, strict=strict)
        except CommandError as e:
            logger.debug("Unparseable response: %s", e)
            raise ParseError(e) from e

    def __str__(self) -> str:
        info = getattr(self._connection, "device_info", None)
        if info is None:
            return f"Device({self._connection!r})"
        return str(info)
