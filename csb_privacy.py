"""
CSB Privacy Layer
=================

XOR obfuscation with a seed-derived keystream.

This is obfuscation, NOT encryption. There is no authentication, the
keystream depends only on the seed (identical seeds reuse it for every
payload), and it falls to known-plaintext and related-seed attacks. It
exists to defeat casual pattern inspection of the encoded output.
"""

from csb_types import OBFUSCATION_DOMAIN, as_bytes
from csb_alphabet import expand_seed


def keystream(seed: bytes, length: int) -> bytes:
    """Keystream of `length` bytes, domain-separated from alphabet derivation."""
    return expand_seed(seed, length, domain=OBFUSCATION_DOMAIN)


def obfuscate(data: bytes, seed: bytes) -> bytes:
    """
    XOR data with the seed keystream. Applying it twice with the same
    seed returns the original bytes.
    """
    data = as_bytes(data)
    if not data:
        return b""
    ks = keystream(seed, len(data))
    mixed = int.from_bytes(data, 'big') ^ int.from_bytes(ks, 'big')
    return mixed.to_bytes(len(data), 'big')
