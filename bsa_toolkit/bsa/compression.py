"""Per-entry decompression.

Codecs are plain callables ``(data, raw_size) -> bytes`` registered per
archive version, so callers can swap in their own implementation.
"""

import zlib
from typing import Callable, Dict

import lz4.frame

from .errors import CorruptArchiveError, UnsupportedCompressionError
from .header import VERSION_OBLIVION, VERSION_SKYRIM, VERSION_SKYRIM_SE, ArchiveFlag, BSAHeader

Codec = Callable[[bytes, int], bytes]


def zlib_codec(data: bytes, raw_size: int) -> bytes:
    """Oblivion, Fallout 3/NV and Skyrim LE store zlib streams."""
    try:
        return zlib.decompress(data, bufsize=max(raw_size, 1))
    except zlib.error as e:
        raise CorruptArchiveError(f"zlib stream is damaged: {e}")


def lz4_frame_codec(data: bytes, raw_size: int) -> bytes:
    """Skyrim SE stores LZ4 frames."""
    try:
        return lz4.frame.decompress(data)
    except RuntimeError as e:
        raise CorruptArchiveError(f"LZ4 frame is damaged: {e}")


_CODECS: Dict[int, Codec] = {
    VERSION_OBLIVION: zlib_codec,
    VERSION_SKYRIM: zlib_codec,
    VERSION_SKYRIM_SE: lz4_frame_codec,
}


def register_codec(version: int, codec: Codec) -> None:
    """Replace the codec used for archives of the given version."""
    _CODECS[version] = codec


def get_codec(header: BSAHeader) -> Codec:
    if header.has(ArchiveFlag.XBOX360_COMPRESSED):
        raise UnsupportedCompressionError("XMem (Xbox 360) compression is not supported")
    try:
        return _CODECS[header.version]
    except KeyError:
        raise UnsupportedCompressionError(f"no codec registered for version {header.version}")


def decompress(header: BSAHeader, data: bytes, raw_size: int) -> bytes:
    """Decode one entry and check it against its declared size."""
    output = get_codec(header)(data, raw_size)
    if len(output) != raw_size:
        raise CorruptArchiveError(
            f"entry decoded to {len(output)} bytes, expected {raw_size}"
        )
    return output
