"""
CSB Types & Constants - CypherSolBase Encoding Format v1
=========================================================

Foundational constants, enumerations, the frame header, the checksum
primitive and the error classes for the CypherSolBase codec. Only
standard library imports live here so every other module can depend
on it.

Wire layout of an encoded string:

    [header symbol][symbols of (canonical bytes || CRC-32 LE)][pad]

The header symbol is taken from the canonical alphabet, so it can be
read without the seed. Everything after it is mapped through the
seed-derived alphabet.
"""

import zlib
import struct
from enum import IntEnum
from dataclasses import dataclass
from typing import Union

# ═══════════════════════════════════════════════════════════════
# ALPHABET & FORMAT CONSTANTS
# ═══════════════════════════════════════════════════════════════

# 64 canonical symbols; every derived alphabet is a permutation of these
CANONICAL_ALPHABET = (
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    "abcdefghijklmnopqrstuvwxyz"
    "0123456789+/"
)
CANONICAL_SYMBOLS = frozenset(CANONICAL_ALPHABET)

# Reserved pad marker, outside the 64-symbol domain and never seed-dependent
PAD_CHAR = "="

# Header symbol packs (version << 2) | mode into 6 bits
FORMAT_VERSION = 1
MAX_FORMAT_VERSION = 0x0F

# CRC-32 trailer width in bytes
CHECKSUM_SIZE = 4

# Smallest symbol stream: a bare 4-byte trailer encodes to 8 symbols
MIN_STREAM_LENGTH = 8

# Zstandard level for HIGH_RATIO
HIGH_RATIO_LEVEL = 19

# Decompression bomb guard
MAX_DECOMPRESSED_SIZE = 1 * 1024 * 1024 * 1024

# Domain tag separating the obfuscation keystream from alphabet derivation
OBFUSCATION_DOMAIN = b"cyphersolbase/obfuscate/v1"


# ═══════════════════════════════════════════════════════════════
# COMPRESSION MODES
# ═══════════════════════════════════════════════════════════════

class CompressionMode(IntEnum):
    """Compression applied before obfuscation. Only the tag is on the wire."""
    NONE        = 0x00  # Identity
    FAST        = 0x01  # LZ4 frame
    HIGH_RATIO  = 0x02  # Zstandard, high level

    @classmethod
    def from_name(cls, name: str) -> 'CompressionMode':
        """
        Parse a mode name. Accepts enum names and the algorithm names
        used by the HTTP front end ("none", "lz4", "brotli", "zstd").
        """
        key = name.strip().lower().replace('-', '_')
        if key in _MODE_ALIASES:
            return _MODE_ALIASES[key]
        raise ValueError(f"Unknown compression mode: {name!r}")


_MODE_ALIASES = {
    'none':       CompressionMode.NONE,
    'fast':       CompressionMode.FAST,
    'lz4':        CompressionMode.FAST,
    'high_ratio': CompressionMode.HIGH_RATIO,
    'highratio':  CompressionMode.HIGH_RATIO,
    'brotli':     CompressionMode.HIGH_RATIO,
    'zstd':       CompressionMode.HIGH_RATIO,
}


# ═══════════════════════════════════════════════════════════════
# ERROR CLASSES
# ═══════════════════════════════════════════════════════════════

class CSBError(Exception):
    """Base error for all CypherSolBase operations."""
    pass

class DecodeError(CSBError):
    """An encoded string could not be turned back into data."""
    pass

class InvalidSymbolError(DecodeError):
    """A non-pad character is not part of the alphabet."""
    pass

class PaddingError(DecodeError):
    """Symbol stream length or pad placement is malformed."""
    pass

class ChecksumMismatchError(DecodeError):
    """Recomputed CRC-32 disagrees with the trailer."""
    pass

class CompressionError(DecodeError):
    """Decompression failed or the compression mode does not match."""
    pass

class FrameError(DecodeError):
    """Header symbol or overall framing is malformed."""
    pass


# ═══════════════════════════════════════════════════════════════
# FRAME HEADER
# ═══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class FrameHeader:
    """
    One-symbol header identifying format version and compression mode.

    Wire format (1 canonical symbol, 6 bits):
        version : 4 bits (high)
        mode    : 2 bits (low)
    """
    version: int
    mode: CompressionMode

    def pack(self) -> str:
        """Serialize to a single canonical symbol."""
        if not 0 < self.version <= MAX_FORMAT_VERSION:
            raise ValueError(f"Format version out of range: {self.version}")
        return CANONICAL_ALPHABET[(self.version << 2) | int(self.mode)]

    @classmethod
    def unpack(cls, symbol: str) -> 'FrameHeader':
        """Deserialize from a single canonical symbol."""
        value = CANONICAL_ALPHABET.find(symbol) if len(symbol) == 1 else -1
        if value < 0:
            raise FrameError(f"Invalid header symbol: {symbol!r}")

        version = value >> 2
        if version != FORMAT_VERSION:
            raise FrameError(f"Unsupported format version: {version}")

        try:
            mode = CompressionMode(value & 0x03)
        except ValueError:
            raise FrameError(f"Unknown compression mode tag: {value & 0x03}") from None
        return cls(version=version, mode=mode)


# ═══════════════════════════════════════════════════════════════
# UTILITY FUNCTIONS
# ═══════════════════════════════════════════════════════════════

def checksum(data: bytes) -> int:
    """Unsigned CRC-32 of data."""
    return zlib.crc32(data) & 0xFFFFFFFF

def pack_checksum(value: int) -> bytes:
    """CRC-32 trailer bytes (little-endian)."""
    return struct.pack('<I', value & 0xFFFFFFFF)

def unpack_checksum(trailer: bytes) -> int:
    if len(trailer) != CHECKSUM_SIZE:
        raise FrameError(f"Checksum trailer needs {CHECKSUM_SIZE} bytes, got {len(trailer)}")
    return struct.unpack('<I', trailer)[0]

def as_bytes(value: Union[bytes, bytearray, memoryview, str]) -> bytes:
    """Coerce seeds and payloads to bytes. Text is UTF-8 encoded."""
    if isinstance(value, bytes):
        return value
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        return value.encode('utf-8')
    raise TypeError(f"Expected bytes or str, got {type(value).__name__}")

def as_text(encoded: Union[str, bytes, bytearray]) -> str:
    """Coerce an encoded string given as ASCII bytes to str."""
    if isinstance(encoded, str):
        return encoded
    if isinstance(encoded, (bytes, bytearray)):
        try:
            return bytes(encoded).decode('ascii')
        except UnicodeDecodeError:
            raise InvalidSymbolError("Encoded string contains non-ASCII bytes") from None
    raise TypeError(f"Expected str or bytes, got {type(encoded).__name__}")
