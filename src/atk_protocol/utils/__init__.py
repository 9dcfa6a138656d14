"""Shared helpers."""

from .checksum import calc_checksum, paired_checksum
