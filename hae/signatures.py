# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only
"""
Plain BLS aggregate and multi-signature verification over BLS12-381.

Signatures and message points live in G1, public keys in G2. Everything in
this module works on decoded points; the hex-string surface is in `hae.aggregation`.

None of these checks defend against rogue public keys on their own. Plain
aggregate verification rejects repeated messages unless the caller asks
otherwise, and plain multi-signature verification trusts the key set it is
given.
"""
import logging
from hashlib import sha256
from typing import Sequence

from py_ecc.bls.hash_to_curve import hash_to_G1
from py_ecc.fields import optimized_bls12_381_FQ12 as FQ12
from py_ecc.optimized_bls12_381 import (
    G2,
    Z1,
    Z2,
    add,
    final_exponentiate,
    is_inf,
    neg,
    pairing,
)

from hae.bls12381 import in_subgroup
from hae.constants import SIG_DST
from hae.errors import EmptyInput, check_lengths

logger = logging.getLogger(__name__)


def message_point(msg: bytes) -> tuple:
    """
    Hash a message to G1 with the minimal-signature-size ciphersuite tag.

    Args:
        msg: The message bytes.

    Returns:
        The message point H(msg) in G1.
    """
    return hash_to_G1(msg, SIG_DST, sha256)


def aggregate_signatures(signatures: Sequence[tuple]) -> tuple:
    """
    Group sum of decoded G1 signatures.

    Raises:
        EmptyInput: If `signatures` is empty.
    """
    if len(signatures) == 0:
        raise EmptyInput("signatures")
    total = Z1
    for sig in signatures:
        total = add(total, sig)
    return total


def aggregate_pubkeys(pubkeys: Sequence[tuple]) -> tuple:
    """
    Group sum of decoded G2 public keys.

    Raises:
        EmptyInput: If `pubkeys` is empty.
    """
    if len(pubkeys) == 0:
        raise EmptyInput("pubkeys")
    total = Z2
    for pk in pubkeys:
        total = add(total, pk)
    return total


def key_validate(pubkey: tuple) -> bool:
    """
    A usable public key is not the identity and lies in the subgroup.
    """
    return not is_inf(pubkey) and in_subgroup(pubkey)


def _pairing_check(signature: tuple, terms: Sequence[tuple[tuple, tuple]]) -> bool:
    # e(sig, -g2) * prod e(msg_i, pk_i) == 1
    acc = pairing(neg(G2), signature, final_exponentiate=False)
    for pubkey, point in terms:
        acc = acc * pairing(pubkey, point, final_exponentiate=False)
    return final_exponentiate(acc) == FQ12.one()


def verify_aggregate_signature(
    signature: tuple,
    pubkeys: Sequence[tuple],
    msgs: Sequence[bytes],
    allow_duplicates: bool = False,
) -> bool:
    """
    Verify an aggregate signature over index-aligned (key, message) pairs.

    Checks the single combined pairing equation

        e(sig, g2) == prod_i e(H(msg_i), pk_i)

    Args:
        signature: Decoded aggregate signature (G1).
        pubkeys: Decoded public keys (G2), `pubkeys[i]` signed `msgs[i]`.
        msgs: The signed messages.
        allow_duplicates: Accept repeated messages. Only safe when the keys
            have been protected against rogue key attacks, e.g. by HAE.

    Returns:
        True iff the equation holds and every point is well formed.

    Raises:
        LengthMismatch: If `pubkeys` and `msgs` differ in length.
        EmptyInput: If there are no participants.
    """
    check_lengths("pubkeys", pubkeys, "msgs", msgs)
    if not allow_duplicates and len(set(msgs)) != len(msgs):
        logger.debug("rejecting aggregate signature with duplicate messages")
        return False
    if not in_subgroup(signature):
        logger.debug("aggregate signature is not in the G1 subgroup")
        return False
    for i, pubkey in enumerate(pubkeys):
        if not key_validate(pubkey):
            logger.debug("public key %d failed validation", i)
            return False
    terms = [(pubkey, message_point(msg)) for pubkey, msg in zip(pubkeys, msgs)]
    return _pairing_check(signature, terms)


def verify_multi_signature(
    signature: tuple, pubkeys: Sequence[tuple], msg: bytes
) -> bool:
    """
    Verify a multi-signature where every key signed the same message.

    The keys are summed and a single pairing equation is checked:

        e(sig, g2) == e(H(msg), sum_i pk_i)

    Args:
        signature: Decoded aggregate signature (G1).
        pubkeys: Decoded public keys (G2).
        msg: The shared message.

    Returns:
        True iff the equation holds and every point is well formed.

    Raises:
        EmptyInput: If `pubkeys` is empty.
    """
    if len(pubkeys) == 0:
        raise EmptyInput("pubkeys")
    if not in_subgroup(signature):
        logger.debug("multi-signature is not in the G1 subgroup")
        return False
    for i, pubkey in enumerate(pubkeys):
        if not key_validate(pubkey):
            logger.debug("public key %d failed validation", i)
            return False
    return _pairing_check(signature, [(aggregate_pubkeys(pubkeys), message_point(msg))])
