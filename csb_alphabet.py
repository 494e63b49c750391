"""
CSB Alphabet Deriver
====================

Turns a seed into a deterministic permutation of the 64 canonical
symbols. Nothing is cached: the permutation is cheap and recomputed on
every call.

Seed expansion (shared with the privacy layer):

    block 0 = SHA-256(domain || seed)
    block n = SHA-256(domain || seed || n as uint32 big-endian),  n >= 1

The alphabet uses an empty domain, so for an empty seed the first block
is the hash of the empty byte string.
"""

import struct
import hashlib
import itertools
from dataclasses import dataclass, field
from typing import Dict, Iterator

from csb_types import (
    CANONICAL_ALPHABET, CANONICAL_SYMBOLS,
    InvalidSymbolError, as_bytes,
)


# ═══════════════════════════════════════════════════════════════
# SEED EXPANSION
# ═══════════════════════════════════════════════════════════════

def seed_blocks(seed: bytes, domain: bytes = b"") -> Iterator[bytes]:
    """Infinite stream of 32-byte SHA-256 blocks derived from seed."""
    seed = as_bytes(seed)
    yield hashlib.sha256(domain + seed).digest()
    for counter in itertools.count(1):
        yield hashlib.sha256(domain + seed + struct.pack('>I', counter)).digest()


def expand_seed(seed: bytes, length: int, domain: bytes = b"") -> bytes:
    """First `length` bytes of the seed block stream."""
    if length < 0:
        raise ValueError(f"length must be non-negative, got {length}")
    buf = bytearray()
    blocks = seed_blocks(seed, domain)
    while len(buf) < length:
        buf.extend(next(blocks))
    return bytes(buf[:length])


# ═══════════════════════════════════════════════════════════════
# DERIVED ALPHABET
# ═══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DerivedAlphabet:
    """
    Bijective map between 6-bit values (0-63) and symbols.

    `symbols[i]` is the symbol for value i; the reverse map is built once
    at construction.
    """
    symbols: str
    _reverse: Dict[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if len(self.symbols) != 64:
            raise ValueError(f"Alphabet needs 64 symbols, got {len(self.symbols)}")
        if set(self.symbols) != CANONICAL_SYMBOLS:
            raise ValueError("Alphabet must be a permutation of the canonical symbol set")
        object.__setattr__(self, '_reverse', {s: i for i, s in enumerate(self.symbols)})

    @property
    def reverse(self) -> Dict[str, int]:
        return self._reverse

    def symbol(self, index: int) -> str:
        return self.symbols[index]

    def index(self, symbol: str) -> int:
        try:
            return self._reverse[symbol]
        except KeyError:
            raise InvalidSymbolError(f"Symbol {symbol!r} is not in the alphabet") from None

    def __len__(self) -> int:
        return 64

    def __contains__(self, symbol: str) -> bool:
        return symbol in self._reverse


def derive_alphabet(seed: bytes) -> DerivedAlphabet:
    """
    Derive the seed's alphabet with a Fisher-Yates shuffle.

    Each swap index j in [0, i] is drawn from the seed byte stream by
    rejection sampling, so every permutation step is unbiased.

    Args:
        seed: Key material. Any length, including empty. Text is UTF-8 encoded.

    Returns:
        DerivedAlphabet, identical for identical seeds in every process.
    """
    stream = itertools.chain.from_iterable(seed_blocks(seed))
    symbols = list(CANONICAL_ALPHABET)

    for i in range(len(symbols) - 1, 0, -1):
        span = i + 1
        limit = 256 - (256 % span)
        byte = next(stream)
        while byte >= limit:
            byte = next(stream)
        j = byte % span
        symbols[i], symbols[j] = symbols[j], symbols[i]

    return DerivedAlphabet(''.join(symbols))
