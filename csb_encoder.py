"""
CSB Encoder - CypherSolBase Encoding Format v1 Encoder
======================================================

Encodes arbitrary bytes into a printable, seed-keyed symbol string:

    raw bytes
      -> compress          (CompressionEngine, mode tag in header)
      -> obfuscate         (XOR with seed keystream)
      -> CRC-32            (over these canonical bytes, appended LE)
      -> symbol mapping    (3 bytes -> 4 symbols of the derived alphabet)
      -> header symbol prefix

Stage order is fixed; the decoder reverses it exactly.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import lz4.frame
import zstandard as zstd

from csb_types import (
    FORMAT_VERSION, PAD_CHAR, HIGH_RATIO_LEVEL, MAX_DECOMPRESSED_SIZE,
    CompressionMode, FrameHeader, CompressionError,
    checksum, pack_checksum, as_bytes,
)
from csb_alphabet import DerivedAlphabet, derive_alphabet
from csb_privacy import obfuscate

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════
# COMPRESSION ENGINE
# ═══════════════════════════════════════════════════════════════

class CompressionEngine:
    """Pluggable compression behind the NONE / FAST / HIGH_RATIO modes."""

    @staticmethod
    def compress(data: bytes, mode: CompressionMode) -> bytes:
        """Compress data using the specified mode."""
        if mode == CompressionMode.NONE:
            return data
        elif mode == CompressionMode.FAST:
            return lz4.frame.compress(data)
        elif mode == CompressionMode.HIGH_RATIO:
            cctx = zstd.ZstdCompressor(level=HIGH_RATIO_LEVEL)
            return cctx.compress(data)
        raise ValueError(f"Unknown compression mode: {mode!r}")

    @staticmethod
    def decompress(data: bytes, mode: CompressionMode,
                   max_output_size: int = MAX_DECOMPRESSED_SIZE) -> bytes:
        """
        Decompress data from the specified mode.

        Raises:
            CompressionError: malformed or truncated stream, wrong mode,
                or output larger than max_output_size.
        """
        if mode == CompressionMode.NONE:
            return data
        if mode not in (CompressionMode.FAST, CompressionMode.HIGH_RATIO):
            raise ValueError(f"Unknown compression mode: {mode!r}")

        try:
            if mode == CompressionMode.FAST:
                out = lz4.frame.decompress(data)
            else:
                dctx = zstd.ZstdDecompressor()
                out = dctx.decompress(data, max_output_size=max_output_size)
        except Exception as e:
            raise CompressionError(f"{mode.name} decompression failed: {e}") from e

        if len(out) > max_output_size:
            raise CompressionError(
                f"Decompressed size {len(out)} exceeds limit {max_output_size}"
            )
        return out


# ═══════════════════════════════════════════════════════════════
# SYMBOL MAPPING
# ═══════════════════════════════════════════════════════════════

def encode_symbols(data: bytes, alphabet: DerivedAlphabet) -> str:
    """
    Map bytes to symbols: each 3-byte group becomes four 6-bit indices,
    most significant bits first. A 1-byte tail gives 2 symbols + 2 pads,
    a 2-byte tail gives 3 symbols + 1 pad.
    """
    table = alphabet.symbols
    out = []
    full = len(data) - (len(data) % 3)

    for i in range(0, full, 3):
        n = (data[i] << 16) | (data[i + 1] << 8) | data[i + 2]
        out.append(table[(n >> 18) & 0x3F])
        out.append(table[(n >> 12) & 0x3F])
        out.append(table[(n >> 6) & 0x3F])
        out.append(table[n & 0x3F])

    tail = len(data) - full
    if tail == 1:
        n = data[full] << 16
        out.append(table[(n >> 18) & 0x3F])
        out.append(table[(n >> 12) & 0x3F])
        out.append(PAD_CHAR * 2)
    elif tail == 2:
        n = (data[full] << 16) | (data[full + 1] << 8)
        out.append(table[(n >> 18) & 0x3F])
        out.append(table[(n >> 12) & 0x3F])
        out.append(table[(n >> 6) & 0x3F])
        out.append(PAD_CHAR)

    return ''.join(out)


# ═══════════════════════════════════════════════════════════════
# ENCODER
# ═══════════════════════════════════════════════════════════════

class CSBEncoder:
    """
    CSB v1 Encoder.

    Usage:
        encoder = CSBEncoder(default_compression=CompressionMode.FAST)
        result = encoder.encode(b"payload", seed=b"secret")
        text = result['encoded']
    """

    def __init__(self, default_compression: CompressionMode = CompressionMode.NONE):
        self.default_compression = CompressionMode(default_compression)
        self.compressor = CompressionEngine()

    def encode(self,
               data: Any,
               seed: Union[bytes, str],
               compression: Optional[CompressionMode] = None) -> Dict[str, Any]:
        """
        Encode data into a CSB string.

        Args:
            data: bytes, str (UTF-8), or any JSON-serializable object.
            seed: Key material for the alphabet and the keystream.
            compression: Compression mode. None = use default.

        Returns:
            dict with the encoded string, checksum, sizes and ratio.
        """
        # ── 1. Serialize input data to bytes ──
        raw_bytes = self._serialize(data)
        seed = as_bytes(seed)

        # ── 2. Determine compression ──
        mode = self.default_compression if compression is None else CompressionMode(compression)

        # ── 3. Compress, then obfuscate ──
        compressed = self.compressor.compress(raw_bytes, mode)
        canonical = obfuscate(compressed, seed)

        # ── 4. Checksum the canonical snapshot ──
        crc = checksum(canonical)

        # ── 5. Map payload + trailer through the derived alphabet ──
        alphabet = derive_alphabet(seed)
        stream = encode_symbols(canonical + pack_checksum(crc), alphabet)

        # ── 6. Prefix the seed-independent header ──
        header = FrameHeader(version=FORMAT_VERSION, mode=mode)
        encoded = header.pack() + stream

        logger.debug("encoded %d bytes (%s, %d compressed) into %d symbols",
                     len(raw_bytes), mode.name, len(compressed), len(encoded))

        return {
            'encoded': encoded,
            'compression': mode.name,
            'version': FORMAT_VERSION,
            'checksum': f"{crc:08x}",
            'size_original': len(raw_bytes),
            'size_compressed': len(compressed),
            'size_encoded': len(encoded),
            'compression_ratio': round(len(raw_bytes) / max(len(compressed), 1), 2),
        }

    # ─── Serialization ────────────────────────────────────────

    def _serialize(self, data: Any) -> bytes:
        """Serialize input to bytes. Accepts bytes, str, dict, list, or JSON-able."""
        if isinstance(data, (bytes, bytearray, memoryview)):
            return bytes(data)
        elif isinstance(data, str):
            return data.encode('utf-8')
        else:
            return json.dumps(data, default=str, ensure_ascii=False).encode('utf-8')


# ═══════════════════════════════════════════════════════════════
# CONVENIENCE FUNCTIONS
# ═══════════════════════════════════════════════════════════════

def encode(data: bytes, seed: Union[bytes, str],
           compression: CompressionMode = CompressionMode.NONE) -> str:
    """Encode bytes into a CSB string in one call."""
    return CSBEncoder(default_compression=compression).encode(as_bytes(data), seed)['encoded']

def encode_file(filepath: str, seed: Union[bytes, str],
                compression: CompressionMode = CompressionMode.NONE,
                output_path: Optional[str] = None) -> Dict[str, Any]:
    """Encode a file and write the CSB text next to it (or to output_path)."""
    raw = Path(filepath).read_bytes()
    result = CSBEncoder(default_compression=compression).encode(raw, seed)

    out = Path(output_path) if output_path else Path(str(filepath) + '.csb')
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(result['encoded'], encoding='ascii')
    result['path'] = str(out)
    return result
