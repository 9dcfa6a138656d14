"""Additive checksums used by the frame and by paired registers."""

from __future__ import annotations

from typing import Iterable

CHECKSUM_BASE = 0x55


def calc_checksum(values: Iterable[int]) -> int:
    """Return the byte that brings ``sum(values) + checksum`` to 0x55 mod 256.

    Values may be wider than a byte; only their sum modulo 256 matters.
    """
    return (CHECKSUM_BASE - (sum(values) & 0xFF)) & 0xFF


def paired_checksum(value: int) -> int:
    """Return the companion byte of a paired register (``0x55 - value``)."""
    if not 0 <= value <= 0xFF:
        raise ValueError(f"Value must be 0-255, got {value}")
    return (CHECKSUM_BASE - value) & 0xFF
