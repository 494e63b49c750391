"""
CSB Verification API
====================

Three levels of verification:

  full_verify        -- seed-aware: decode end-to-end, checksum included.
  partial_verify     -- seed-blind: structural checks only. Never confirms
                        integrity, so it never returns True.
  zk_checksum_verify -- interface placeholder for a future proof that a
                        checksum matches data without revealing the seed.
"""

import logging
from typing import Any, Dict, Union

from csb_types import CompressionMode, DecodeError, checksum, as_bytes
from csb_decoder import CSBDecoder

logger = logging.getLogger(__name__)


def full_verify(encoded: Union[str, bytes], seed: Union[bytes, str],
                compression: CompressionMode = CompressionMode.NONE) -> bool:
    """True only if the string decodes and its checksum matches."""
    try:
        CSBDecoder().decode(encoded, seed, compression)
    except DecodeError as e:
        logger.debug("full verification failed: %s: %s", type(e).__name__, e)
        return False
    return True


def check_structure(encoded: Union[str, bytes]) -> Dict[str, Any]:
    """Seed-blind structural report (see CSBDecoder.inspect)."""
    return CSBDecoder().inspect(encoded)


def partial_verify(encoded: Union[str, bytes]) -> bool:
    """
    Structural verification without the seed.

    The checksum trailer is mapped through the seed's alphabet and covers
    obfuscated bytes, so a stream whose content was tampered with can be
    structurally perfect. Integrity is therefore never confirmed here and
    the result is always False; a well-formed stream is merely logged as
    indeterminate. Use check_structure() for the structural verdict and
    full_verify() for an integrity verdict.
    """
    report = check_structure(encoded)
    if report['valid']:
        logger.debug("partial verification indeterminate: structure ok, integrity unknown")
    else:
        logger.debug("partial verification failed: %s", "; ".join(report['errors']))
    return False


def zk_checksum_verify(data: bytes, claimed_checksum: int) -> bool:
    """
    Placeholder for a zero-knowledge checksum proof.

    Inputs are the data (claim) and a CRC-32; output is a boolean. Today
    this is a plain equality check that reveals the data to the verifier
    and proves nothing. It is not a security mechanism and must be
    replaced by a real proof system before any such use.
    """
    return checksum(as_bytes(data)) == (claimed_checksum & 0xFFFFFFFF)
