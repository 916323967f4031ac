# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only

import hashlib
from typing import Sequence

from hae.constants import HAE_DOMAIN_TAG, EXPONENT_BYTES


def new_xof():
    """
    Construct a fresh SHAKE-256 stream seeded with the HAE domain tag.

    Every caller gets its own instance; streams are never shared between
    calls or threads.

    Returns:
        A `hashlib.shake_256` object that has absorbed `HAE_DOMAIN_TAG`.
    """
    return hashlib.shake_256(bytes.fromhex(HAE_DOMAIN_TAG))


def hash_to_ints(encodings: Sequence[bytes], width: int = EXPONENT_BYTES) -> list[int]:
    """
    Hash an ordered sequence of encodings to one integer per encoding.

    The encodings are absorbed in order with no separators, so they must be
    fixed-width. The stream is then squeezed for exactly `width * n` bytes and
    read back in `width`-byte chunks, each interpreted big-endian:

        out = XOF(tag || e_0 || e_1 || ... || e_{n-1}, width * n)
        t_i = int(out[width*i : width*(i+1)])

    Args:
        encodings: Fixed-width byte strings, e.g. uncompressed points.
        width: Output width of each integer in bytes.

    Returns:
        A list of `len(encodings)` integers in the range [0, 2**(8*width)).
    """
    xof = new_xof()
    for encoding in encodings:
        xof.update(encoding)
    stream = xof.digest(width * len(encodings))
    return [
        int.from_bytes(stream[i : i + width], "big")
        for i in range(0, len(stream), width)
    ]
