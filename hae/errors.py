# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only


class HAEError(ValueError):
    """Base class for structural input errors."""


class LengthMismatch(HAEError):
    def __init__(self, left: str, left_len: int, right: str, right_len: int):
        super().__init__(
            f"{left} and {right} must have the same length, "
            f"got {left_len} and {right_len}"
        )
        self.left_len = left_len
        self.right_len = right_len


class EmptyInput(HAEError):
    def __init__(self, what: str = "pubkeys"):
        super().__init__(f"{what} must not be empty")


def check_lengths(left: str, left_seq, right: str, right_seq) -> None:
    """
    Raise before any curve arithmetic if two index-aligned sequences disagree.

    Args:
        left: Name of the first sequence, used in the error message.
        left_seq: The first sequence.
        right: Name of the second sequence.
        right_seq: The second sequence.

    Raises:
        LengthMismatch: If the lengths differ.
        EmptyInput: If both sequences are empty.
    """
    if len(left_seq) != len(right_seq):
        raise LengthMismatch(left, len(left_seq), right, len(right_seq))
    if len(left_seq) == 0:
        raise EmptyInput(left)
