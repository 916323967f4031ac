# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only
import secrets
from typing import Sequence
from eth_typing import BLSPubkey, BLSSignature
from hae.constants import G1_HEX_LENGTH, G2_HEX_LENGTH, G2_UNCOMPRESSED_BYTES
from hae.errors import EmptyInput
from py_ecc.bls.g2_primitives import (
    G1_to_pubkey,
    G2_to_signature,
    pubkey_to_G1,
    signature_to_G2,
    subgroup_check,
)
from py_ecc.fields import optimized_bls12_381_FQ as FQ
from py_ecc.fields import optimized_bls12_381_FQ12 as FQ12
from py_ecc.optimized_bls12_381 import (
    G1,
    G2,
    Z1,
    Z2,
    add,
    curve_order,
    is_inf,
    multiply,
    neg,
    normalize,
    pairing,
)


def rng() -> int:
    """
    Samples a uniformly random non-zero scalar using the secrets module.

    Returns:
        int: A random number in [1, curve_order - 1].
    """
    return secrets.randbelow(curve_order - 1) + 1


def g1_point(scalar: int) -> str:
    """
    Generates a BLS12-381 point from the G1 generator using scalar multiplication
    and returns it in compressed format.

    Args:
        scalar (int): The scalar value for multiplication.

    Returns:
        str: The resulting BLS12-381 G1 point in compressed hex format.
    """
    return G1_to_pubkey(multiply(G1, scalar)).hex()


def g2_point(scalar: int) -> str:
    """
    Generates a BLS12-381 point from the G2 generator using scalar multiplication
    and returns it in compressed format.

    Args:
        scalar (int): The scalar value for multiplication.

    Returns:
        str: The resulting BLS12-381 G2 point in compressed hex format.
    """
    return G2_to_signature(multiply(G2, scalar)).hex()


def g1_from_hex(element: str) -> tuple:
    """
    Strictly decodes a compressed G1 hex string.

    Args:
        element (str): The compressed point, exactly 96 hex characters.

    Returns:
        tuple: The decoded projective point.

    Raises:
        ValueError: If the length is wrong, the string is not hex, or the
            encoding is not a point on the curve.
    """
    if len(element) != G1_HEX_LENGTH:
        raise ValueError(
            f"G1 element must be {G1_HEX_LENGTH} hex chars, got {len(element)}"
        )
    return pubkey_to_G1(BLSPubkey(bytes.fromhex(element)))


def g2_from_hex(element: str) -> tuple:
    """
    Strictly decodes a compressed G2 hex string.

    Args:
        element (str): The compressed point, exactly 192 hex characters.

    Returns:
        tuple: The decoded projective point.

    Raises:
        ValueError: If the length is wrong, the string is not hex, or the
            encoding is not a point on the twist.
    """
    if len(element) != G2_HEX_LENGTH:
        raise ValueError(
            f"G2 element must be {G2_HEX_LENGTH} hex chars, got {len(element)}"
        )
    return signature_to_G2(BLSSignature(bytes.fromhex(element)))


def uncompress(element: str) -> tuple:
    """
    Uncompresses a hexadecimal string to a BLS12-381 point.

    The group is chosen by length: 96 hex characters is G1, anything else
    must be a 192 character G2 element.

    Args:
        element (str): The compressed point as a hexadecimal string.

    Returns:
        tuple: The uncompressed point.
    """
    if len(element) == G1_HEX_LENGTH:
        return g1_from_hex(element)
    else:
        return g2_from_hex(element)


def compress(element: tuple) -> str:
    """
    Compresses a BLS12-381 point to a hexadecimal string.

    Args:
        element (tuple): The point to be compressed.

    Returns:
        str: The compressed point as a hexadecimal string.
    """
    if isinstance(element[2], FQ):
        return G1_to_pubkey(element).hex()
    else:
        return G2_to_signature(element).hex()


def scale(element: str, scalar: int) -> str:
    """
    Scales a BLS12-381 point by a given scalar using scalar multiplication.

    Args:
        element (str): The compressed point to be scaled.
        scalar (int): The scalar value for multiplication.

    Returns:
        str: The resulting scaled point.
    """
    return compress(multiply(uncompress(element), scalar))


def invert(element: str) -> str:
    """
    Calculates the inverse of a BLS12-381 point.

    Args:
        element (str): A compressed point.

    Returns:
        str: The negated point.
    """
    return compress(neg(uncompress(element)))


def combine(left_element: str, right_element: str) -> str:
    """
    Combines two BLS12-381 points using addition.

    Args:
        left_element (str): A compressed point.
        right_element (str): A compressed point.

    Returns:
        str: The resulting combined point.
    """
    return compress(add(uncompress(left_element), uncompress(right_element)))


def aggregate_points(elements: Sequence[str]) -> str:
    """
    Sums a non-empty sequence of compressed points from the same group.

    Args:
        elements: Compressed points, all G1 or all G2.

    Returns:
        str: The compressed group sum.

    Raises:
        EmptyInput: If `elements` is empty.
    """
    if len(elements) == 0:
        raise EmptyInput("elements")
    total = uncompress(elements[0])
    for element in elements[1:]:
        total = add(total, uncompress(element))
    return compress(total)


def pair(g1_element: str, g2_element: str, final_exponentiate: bool = True) -> FQ12:
    """
    Compute the pairing operation on elliptic curve points represented as strings.

    Args:
        g1_element (str): A string representation of a point on G1 elliptic curve.
        g2_element (str): A string representation of a point on G2 elliptic curve.
        final_exponentiate (bool, optional): Whether to perform final exponentiation in the pairing computation. Defaults to True.

    Returns:
        FQ12: Result of the pairing operation as an element of the FQ12 field.
    """
    return pairing(uncompress(g2_element), uncompress(g1_element), final_exponentiate)


def in_subgroup(point: tuple) -> bool:
    """
    Checks that a decoded point lies in the prime-order subgroup.

    Args:
        point (tuple): A decoded G1 or G2 point.

    Returns:
        bool: True if `[curve_order]point` is the identity.
    """
    return subgroup_check(point)


def g2_to_uncompressed(point: tuple) -> bytes:
    """
    Serialize a decoded G2 point to its canonical uncompressed encoding.

    The affine coordinates are written as

        x.c1 || x.c0 || y.c1 || y.c0

    each a 48-byte big-endian integer, 192 bytes in total. The point at
    infinity is encoded as 0x40 followed by 191 zero bytes. Every encoding
    has the same width, so concatenations of encodings are unambiguous.

    Args:
        point (tuple): A projective G2 point.

    Returns:
        bytes: The 192-byte uncompressed encoding.
    """
    if is_inf(point):
        return b"\x40" + bytes(G2_UNCOMPRESSED_BYTES - 1)
    x, y = normalize(point)
    coords = (x.coeffs[1], x.coeffs[0], y.coeffs[1], y.coeffs[0])
    return b"".join(int(c).to_bytes(48, "big") for c in coords)


def uncompressed(element: str) -> bytes:
    """
    Canonical uncompressed encoding of a compressed G2 hex string.

    Args:
        element (str): A compressed G2 point.

    Returns:
        bytes: See `g2_to_uncompressed`.
    """
    return g2_to_uncompressed(g2_from_hex(element))


# identity elements
g1_identity = compress(Z1)
g2_identity = compress(Z2)
