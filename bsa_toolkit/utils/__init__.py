"""Shared helpers."""

from .binary import BIG_ENDIAN, LITTLE_ENDIAN, BinaryReader

__all__ = ["BinaryReader", "BIG_ENDIAN", "LITTLE_ENDIAN"]
