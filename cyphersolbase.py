"""
CypherSolBase - seed-keyed printable byte encoding
==================================================

Maps arbitrary bytes to a printable symbol string through an alphabet
derived from a secret seed, with optional compression, XOR obfuscation
and a CRC-32 integrity trailer.

The obfuscation layer is NOT encryption. See csb_privacy.
"""

from csb_types import (
    CompressionMode, FrameHeader,
    CANONICAL_ALPHABET, PAD_CHAR, FORMAT_VERSION,
    CSBError, DecodeError, InvalidSymbolError, PaddingError,
    ChecksumMismatchError, CompressionError, FrameError,
    checksum,
)
from csb_alphabet import DerivedAlphabet, derive_alphabet, expand_seed
from csb_privacy import obfuscate
from csb_encoder import CSBEncoder, CompressionEngine, encode, encode_file, encode_symbols
from csb_decoder import CSBDecoder, decode, decode_file, decode_symbols
from csb_verify import full_verify, partial_verify, check_structure, zk_checksum_verify

__version__ = "0.1.0"
__all__ = [
    'encode', 'decode', 'full_verify', 'partial_verify', 'zk_checksum_verify',
    'check_structure', 'encode_file', 'decode_file',
    'CSBEncoder', 'CSBDecoder', 'CompressionEngine',
    'derive_alphabet', 'expand_seed', 'DerivedAlphabet', 'obfuscate', 'checksum',
    'encode_symbols', 'decode_symbols',
    'CompressionMode', 'FrameHeader',
    'CANONICAL_ALPHABET', 'PAD_CHAR', 'FORMAT_VERSION',
    'CSBError', 'DecodeError', 'InvalidSymbolError', 'PaddingError',
    'ChecksumMismatchError', 'CompressionError', 'FrameError',
]
