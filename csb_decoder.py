"""
CSB Decoder - CypherSolBase Encoding Format v1 Decoder
======================================================

Reverses the encoder stage by stage:

    header symbol   -> version + compression mode (seed-blind)
    symbol stream   -> canonical bytes || CRC-32 trailer
    CRC-32 check    -> ChecksumMismatchError on disagreement
    de-obfuscate    -> compressed bytes
    decompress      -> original data

Every malformed input ends in a DecodeError subclass; nothing is
returned from a stream that failed any check.

`inspect()` runs only the seed-independent structural checks and backs
the partial verification API.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from csb_types import (
    PAD_CHAR, CHECKSUM_SIZE, MIN_STREAM_LENGTH, MAX_DECOMPRESSED_SIZE,
    CANONICAL_SYMBOLS,
    CompressionMode, FrameHeader,
    DecodeError, PaddingError, ChecksumMismatchError, CompressionError, FrameError,
    checksum, unpack_checksum, as_bytes, as_text,
)
from csb_alphabet import DerivedAlphabet, derive_alphabet
from csb_privacy import obfuscate
from csb_encoder import CompressionEngine

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════
# SYMBOL MAPPING
# ═══════════════════════════════════════════════════════════════

def _split_padding(text: str):
    """Validate length and pad placement. Returns (data_symbols, pad_count)."""
    if len(text) % 4 != 0:
        raise PaddingError(f"Symbol stream length {len(text)} is not a multiple of 4")

    stripped = text.rstrip(PAD_CHAR)
    pad_count = len(text) - len(stripped)
    if pad_count > 2:
        raise PaddingError(f"Too many pad characters: {pad_count}")
    if PAD_CHAR in stripped:
        raise PaddingError(f"Pad character at position {stripped.index(PAD_CHAR)} precedes data")
    return stripped, pad_count


def decode_symbols(text: str, alphabet: DerivedAlphabet) -> bytes:
    """
    Map symbols back to bytes through the alphabet's reverse lookup.

    Raises:
        PaddingError: bad length, pad placement, or non-zero padding bits.
        InvalidSymbolError: a non-pad character outside the alphabet.
    """
    stripped, pad_count = _split_padding(text)
    values = [alphabet.index(c) for c in stripped]

    out = bytearray()
    full = len(values) - (len(values) % 4)
    for i in range(0, full, 4):
        n = (values[i] << 18) | (values[i + 1] << 12) | (values[i + 2] << 6) | values[i + 3]
        out.append((n >> 16) & 0xFF)
        out.append((n >> 8) & 0xFF)
        out.append(n & 0xFF)

    if pad_count == 2:
        n = (values[full] << 18) | (values[full + 1] << 12)
        if n & 0xFFFF:
            raise PaddingError("Non-zero bits in padded group")
        out.append((n >> 16) & 0xFF)
    elif pad_count == 1:
        n = (values[full] << 18) | (values[full + 1] << 12) | (values[full + 2] << 6)
        if n & 0xFF:
            raise PaddingError("Non-zero bits in padded group")
        out.append((n >> 16) & 0xFF)
        out.append((n >> 8) & 0xFF)

    return bytes(out)


# ═══════════════════════════════════════════════════════════════
# DECODER
# ═══════════════════════════════════════════════════════════════

class CSBDecoder:
    """
    CSB v1 Decoder.

    Usage:
        decoder = CSBDecoder()
        result = decoder.decode(text, seed=b"secret", compression=CompressionMode.FAST)
        data = result['data']
        report = decoder.inspect(text)   # no seed needed
    """

    def __init__(self, max_output_size: int = MAX_DECOMPRESSED_SIZE):
        self.max_output_size = max_output_size
        self.compressor = CompressionEngine()

    # ─── Main Entry Points ────────────────────────────────────

    def decode(self,
               encoded: Union[str, bytes],
               seed: Union[bytes, str],
               compression: CompressionMode = CompressionMode.NONE) -> Dict[str, Any]:
        """
        Decode a CSB string.

        Args:
            encoded: Encoded string (or its ASCII bytes).
            seed: The seed used at encode time.
            compression: The mode used at encode time. Must match the header.

        Returns:
            dict with 'data', 'compression', 'checksum' and sizes.

        Raises:
            DecodeError subclass describing the first failed check.
        """
        text = as_text(encoded)
        seed = as_bytes(seed)
        mode = CompressionMode(compression)

        # ── 1. Header ──
        if not text:
            raise FrameError("Encoded string is empty")
        header = FrameHeader.unpack(text[0])
        if header.mode != mode:
            raise CompressionError(
                f"Payload was encoded with {header.mode.name}, "
                f"decode requested {mode.name}"
            )

        # ── 2. Symbols -> canonical bytes + trailer ──
        framed = decode_symbols(text[1:], derive_alphabet(seed))
        if len(framed) < CHECKSUM_SIZE:
            raise FrameError(f"Stream too short for checksum trailer ({len(framed)} bytes)")
        canonical = framed[:-CHECKSUM_SIZE]
        expected = unpack_checksum(framed[-CHECKSUM_SIZE:])

        # ── 3. Checksum ──
        actual = checksum(canonical)
        if actual != expected:
            raise ChecksumMismatchError(
                f"Checksum mismatch (trailer {expected:08x}, computed {actual:08x})"
            )

        # ── 4. De-obfuscate, decompress ──
        compressed = obfuscate(canonical, seed)
        data = self.compressor.decompress(compressed, mode, self.max_output_size)

        logger.debug("decoded %d symbols (%s) into %d bytes",
                     len(text), mode.name, len(data))

        return {
            'data': data,
            'compression': mode.name,
            'version': header.version,
            'checksum': f"{actual:08x}",
            'size_encoded': len(text),
            'size_decoded': len(data),
        }

    def inspect(self, encoded: Union[str, bytes]) -> Dict[str, Any]:
        """
        Seed-blind structural report.

        Checks the header, stream length, symbol domain and pad placement.
        Content integrity is always reported as indeterminate: the checksum
        sits behind the seed-derived alphabet and the keystream.
        """
        errors: List[str] = []
        header: Optional[FrameHeader] = None
        pad_count = 0

        try:
            text = as_text(encoded)
        except DecodeError as e:
            text = ""
            errors.append(str(e))

        if not text:
            if not errors:
                errors.append("Encoded string is empty")
        else:
            try:
                header = FrameHeader.unpack(text[0])
            except FrameError as e:
                errors.append(str(e))

            stream = text[1:]
            if len(stream) < MIN_STREAM_LENGTH:
                errors.append(
                    f"Symbol stream too short: {len(stream)} < {MIN_STREAM_LENGTH}"
                )

            foreign = sorted({c for c in stream if c not in CANONICAL_SYMBOLS and c != PAD_CHAR})
            if foreign:
                errors.append(f"Characters outside every alphabet: {''.join(foreign)!r}")

            try:
                _, pad_count = _split_padding(stream)
            except PaddingError as e:
                errors.append(str(e))

        return {
            'valid': not errors,
            'errors': errors,
            'version': header.version if header else None,
            'compression': header.mode.name if header else None,
            'symbol_count': max(len(text) - 1, 0),
            'pad_count': pad_count,
            'integrity': 'indeterminate',
        }


# ═══════════════════════════════════════════════════════════════
# CONVENIENCE FUNCTIONS
# ═══════════════════════════════════════════════════════════════

def decode(encoded: Union[str, bytes], seed: Union[bytes, str],
           compression: CompressionMode = CompressionMode.NONE) -> bytes:
    """Decode a CSB string in one call."""
    return CSBDecoder().decode(encoded, seed, compression)['data']

def decode_file(filepath: str, seed: Union[bytes, str],
                compression: CompressionMode = CompressionMode.NONE) -> bytes:
    """Decode a .csb text file in one call."""
    return decode(Path(filepath).read_bytes().strip(), seed, compression)
