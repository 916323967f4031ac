# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only
"""
BLS aggregation with hashed aggregation exponents (HAE).

This is normal BLS, except that when aggregating, the `n` public keys are
hashed to `n` numbers t_0, ..., t_{n-1} in [0, 2^128). The ith signature is
scaled by t_i before the signatures are summed. The verifier rehashes the
same ordered key list to recover the t_i, scales the ith public key by t_i,
and then runs the usual BLS check against the scaled keys. By bilinearity

    e([t]S, g2) == e(S, [t]g2)

so scaling the signature side during aggregation and the key side during
verification leaves the verification equation intact.

Since every t_i depends on the whole key list, a participant can no longer
choose its public key as a function of the others to cancel them out (the
rogue public key attack). See Boneh, Drijvers and Neven, "Compact
Multi-Signatures for Smaller Blockchains".

The order of `pubkeys` is part of the hash input. Aggregator and verifier
must use the same order or every exponent changes.
"""
import logging
from typing import Sequence

from py_ecc.optimized_bls12_381 import multiply

from hae.bls12381 import compress, g1_from_hex, g2_from_hex, g2_to_uncompressed
from hae.errors import EmptyInput, check_lengths
from hae.hashing import hash_to_ints
from hae.signatures import (
    aggregate_signatures,
    key_validate,
    verify_aggregate_signature,
    verify_multi_signature,
)

logger = logging.getLogger(__name__)


def _exponents(points: Sequence[tuple]) -> list[int]:
    return hash_to_ints([g2_to_uncompressed(point) for point in points])


def _scaled_pubkeys(pubkeys: Sequence[str]) -> list[tuple]:
    # new list; the caller's keys are left alone
    points = [g2_from_hex(pk) for pk in pubkeys]
    # validate before scaling, an exponent can clear a torsion component
    for i, point in enumerate(points):
        if not key_validate(point):
            raise ValueError(f"public key {i} is the identity or outside the G2 subgroup")
    return [multiply(point, t) for point, t in zip(points, _exponents(points))]


def derive_exponents(pubkeys: Sequence[str]) -> list[int]:
    """
    Hash an ordered list of public keys to one 128-bit exponent per key.

    The canonical uncompressed encoding of each key is absorbed into a fresh
    SHAKE-256 stream, key 0 first, and `16 * n` bytes are squeezed out. Chunk
    `i`, read big-endian, is the exponent for key `i`. The stream absorbs
    `HAE_DOMAIN_TAG` before the first key, so the hash input is
    tag || key_0 || ... || key_{n-1}.

    Args:
        pubkeys: Compressed G2 public keys in participant order.

    Returns:
        A list of `len(pubkeys)` integers in [0, 2**128).

    Raises:
        EmptyInput: If `pubkeys` is empty.
        ValueError: If a key is not a valid compressed G2 point.
    """
    if len(pubkeys) == 0:
        raise EmptyInput("pubkeys")
    return _exponents([g2_from_hex(pk) for pk in pubkeys])


def aggregate(signatures: Sequence[str], pubkeys: Sequence[str]) -> str:
    """
    Aggregate signatures using exponents derived from the signers' keys.

    Computes

        sigma = sum_i [t_i] signatures[i]

    where `t = derive_exponents(pubkeys)`. `signatures[i]` must belong to
    `pubkeys[i]`.

    Args:
        signatures: Compressed G1 signatures.
        pubkeys: Compressed G2 public keys, index-aligned with `signatures`.

    Returns:
        The compressed aggregate signature.

    Raises:
        LengthMismatch: If the sequences differ in length.
        EmptyInput: If both sequences are empty.
        ValueError: If a signature or key does not decode.
    """
    check_lengths("signatures", signatures, "pubkeys", pubkeys)
    logger.debug("aggregating %d signatures with HAE", len(signatures))
    exponents = derive_exponents(pubkeys)
    scaled = [multiply(g1_from_hex(sig), t) for sig, t in zip(signatures, exponents)]
    return compress(aggregate_signatures(scaled))


def verify_aggregate(
    aggregate_sig: str, pubkeys: Sequence[str], msgs: Sequence[bytes]
) -> bool:
    """
    Verify an HAE aggregate of signatures on (possibly) different messages.

    Args:
        aggregate_sig: Compressed G1 aggregate from `aggregate`.
        pubkeys: Compressed G2 keys in the order used for aggregation.
        msgs: `msgs[i]` is the message signed under `pubkeys[i]`.

    Returns:
        True iff the aggregate is valid. Forgeries, wrong messages, wrong
        keys and undecodable points all give False.

    Raises:
        LengthMismatch: If `pubkeys` and `msgs` differ in length.
        EmptyInput: If there are no participants.
    """
    check_lengths("pubkeys", pubkeys, "msgs", msgs)
    logger.debug("verifying HAE aggregate over %d messages", len(msgs))
    try:
        signature = g1_from_hex(aggregate_sig)
        scaled = _scaled_pubkeys(pubkeys)
    except ValueError as err:
        logger.debug("malformed point in HAE aggregate: %s", err)
        return False
    return verify_aggregate_signature(signature, scaled, msgs, allow_duplicates=True)


def verify_multi(aggregate_sig: str, pubkeys: Sequence[str], msg: bytes) -> bool:
    """
    Verify an HAE aggregate where every signer signed the same message.

    Args:
        aggregate_sig: Compressed G1 aggregate from `aggregate`.
        pubkeys: Compressed G2 keys in the order used for aggregation.
        msg: The shared message.

    Returns:
        True iff the aggregate is valid, False otherwise.

    Raises:
        EmptyInput: If `pubkeys` is empty.
    """
    if len(pubkeys) == 0:
        raise EmptyInput("pubkeys")
    logger.debug("verifying HAE multi-signature over %d keys", len(pubkeys))
    try:
        signature = g1_from_hex(aggregate_sig)
        scaled = _scaled_pubkeys(pubkeys)
    except ValueError as err:
        logger.debug("malformed point in HAE multi-signature: %s", err)
        return False
    return verify_multi_signature(signature, scaled, msg)
