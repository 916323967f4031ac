# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only

# domain tags
HAE_DOMAIN_TAG = "HAE|Exponents|v1|".encode("utf-8").hex()
SIG_DST = b"BLS_SIG_BLS12381G1_XMD:SHA-256_SSWU_RO_NUL_"

# hashed aggregation exponents are 128 bits wide
EXPONENT_BYTES = 16

# compressed point sizes in hex characters
G1_HEX_LENGTH = 96
G2_HEX_LENGTH = 192

# x.c1 || x.c0 || y.c1 || y.c0, 48 bytes each
G2_UNCOMPRESSED_BYTES = 192
