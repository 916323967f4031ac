# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only
from hae.aggregation import aggregate, derive_exponents, verify_aggregate, verify_multi
from hae.errors import EmptyInput, HAEError, LengthMismatch

__all__ = [
    "aggregate",
    "derive_exponents",
    "verify_aggregate",
    "verify_multi",
    "EmptyInput",
    "HAEError",
    "LengthMismatch",
]
