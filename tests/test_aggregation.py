# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only
from concurrent.futures import ThreadPoolExecutor

import pytest
from py_ecc.optimized_bls12_381 import add, multiply
import hae.aggregation as aggregation_mod
from hae.aggregation import aggregate, derive_exponents, verify_aggregate, verify_multi
from hae.bls12381 import (
    combine,
    compress,
    g2_point,
    g2_identity,
    invert,
    scale,
    aggregate_points,
    uncompressed,
    rng,
    g2_from_hex,
    in_subgroup,
)
from hae.errors import EmptyInput, LengthMismatch
from hae.hashing import hash_to_ints
from hae.signatures import message_point

SECRETS = [1234567890, 987654321, 5555555555]
PUBKEYS = [g2_point(sk) for sk in SECRETS]
MSGS = [b"alice", b"bob", b"carol"]


def sign(sk: int, msg: bytes) -> str:
    return compress(multiply(message_point(msg), sk))


def flip_bit(element: str, bit: int = 0) -> str:
    raw = bytearray(bytes.fromhex(element))
    raw[-1 - bit // 8] ^= 1 << (bit % 8)
    return raw.hex()


def twist_point_outside_subgroup() -> tuple:
    # small x coordinates land on the twist but not in the prime-order subgroup
    for x in range(1, 100):
        encoding = (bytes([0x80]) + bytes(47) + x.to_bytes(48, "big")).hex()
        try:
            point = g2_from_hex(encoding)
        except ValueError:
            continue
        if not in_subgroup(point):
            return point
    raise AssertionError("no twist point outside the subgroup")


def torsion_key() -> str:
    # a valid key with a component outside the subgroup added on
    return compress(add(g2_from_hex(PUBKEYS[1]), twist_point_outside_subgroup()))


SIGS = [sign(sk, m) for sk, m in zip(SECRETS, MSGS)]


def test_exponents_are_128_bit():
    exponents = derive_exponents(PUBKEYS)
    assert len(exponents) == len(PUBKEYS)
    assert all(0 <= t < 2**128 for t in exponents)


def test_exponents_are_deterministic():
    assert derive_exponents(PUBKEYS) == derive_exponents(list(PUBKEYS))


def test_exponents_are_order_sensitive():
    swapped = [PUBKEYS[1], PUBKEYS[0], PUBKEYS[2]]
    rotated = PUBKEYS[1:] + PUBKEYS[:1]
    assert derive_exponents(swapped) != derive_exponents(PUBKEYS)
    assert derive_exponents(rotated) != derive_exponents(PUBKEYS)


def test_exponents_depend_on_every_key():
    base = derive_exponents(PUBKEYS)
    changed = derive_exponents(PUBKEYS[:2] + [g2_point(7)])
    # even the untouched keys get new exponents
    assert base[0] != changed[0]
    assert base[1] != changed[1]


def test_exponents_hash_uncompressed_keys():
    expected = hash_to_ints([uncompressed(pk) for pk in PUBKEYS])
    assert derive_exponents(PUBKEYS) == expected


def test_exponents_single_key():
    assert len(derive_exponents(PUBKEYS[:1])) == 1


def test_exponents_empty():
    with pytest.raises(EmptyInput):
        derive_exponents([])


def test_exponents_malformed_key():
    with pytest.raises(ValueError):
        derive_exponents(["00" * 96])


def test_exponents_concurrent():
    key_sets = [PUBKEYS, PUBKEYS[::-1], PUBKEYS[:2], PUBKEYS[1:]] * 2
    expected = [derive_exponents(keys) for keys in key_sets]
    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(derive_exponents, key_sets))
    assert results == expected


def test_aggregate_scales_each_signature():
    exponents = derive_exponents(PUBKEYS)
    expected = aggregate_points([scale(s, t) for s, t in zip(SIGS, exponents)])
    assert aggregate(SIGS, PUBKEYS) == expected


def test_aggregate_length_mismatch():
    with pytest.raises(LengthMismatch):
        aggregate(SIGS[:2], PUBKEYS)


def test_length_mismatch_before_decoding():
    # garbage points are never touched
    with pytest.raises(LengthMismatch):
        aggregate(["zz"], ["zz", "zz"])
    with pytest.raises(LengthMismatch):
        verify_aggregate("zz", ["zz", "zz"], [b"m"])


def test_length_mismatch_is_a_value_error():
    with pytest.raises(ValueError):
        aggregate(SIGS, PUBKEYS[:1])


def test_aggregate_empty():
    with pytest.raises(EmptyInput):
        aggregate([], [])


def test_verify_aggregate_round_trip():
    agg = aggregate(SIGS, PUBKEYS)
    assert verify_aggregate(agg, PUBKEYS, MSGS)


def test_verify_aggregate_random_signers():
    secrets = [rng() for _ in range(2)]
    pubkeys = [g2_point(sk) for sk in secrets]
    msgs = [b"first", b"second"]
    sigs = [sign(sk, m) for sk, m in zip(secrets, msgs)]
    assert verify_aggregate(aggregate(sigs, pubkeys), pubkeys, msgs)


def test_verify_aggregate_single_signer():
    agg = aggregate(SIGS[:1], PUBKEYS[:1])
    assert verify_aggregate(agg, PUBKEYS[:1], MSGS[:1])


def test_verify_aggregate_allows_repeated_messages():
    msgs = [b"same", b"same", b"other"]
    sigs = [sign(sk, m) for sk, m in zip(SECRETS, msgs)]
    assert verify_aggregate(aggregate(sigs, PUBKEYS), PUBKEYS, msgs)


def test_plain_aggregate_does_not_verify_under_hae():
    plain = aggregate_points(SIGS)
    assert not verify_aggregate(plain, PUBKEYS, MSGS)


def test_verify_aggregate_wrong_order():
    agg = aggregate(SIGS, PUBKEYS)
    assert not verify_aggregate(agg, PUBKEYS[::-1], MSGS[::-1])


def test_verify_aggregate_tampered_message():
    agg = aggregate(SIGS, PUBKEYS)
    msgs = [MSGS[0], bytes([MSGS[1][0] ^ 1]) + MSGS[1][1:], MSGS[2]]
    assert not verify_aggregate(agg, PUBKEYS, msgs)


def test_verify_aggregate_tampered_key():
    agg = aggregate(SIGS, PUBKEYS)
    keys = [PUBKEYS[0], PUBKEYS[1], flip_bit(PUBKEYS[2])]
    assert not verify_aggregate(agg, keys, MSGS)


def test_verify_aggregate_tampered_signature():
    agg = aggregate(SIGS, PUBKEYS)
    assert not verify_aggregate(flip_bit(agg), PUBKEYS, MSGS)
    # the sign bit gives the negated point, which still decodes
    assert not verify_aggregate(flip_bit(agg, 8 * 48 - 3), PUBKEYS, MSGS)


def test_verify_aggregate_malformed_signature():
    assert not verify_aggregate("zz" * 48, PUBKEYS, MSGS)
    assert not verify_aggregate(g2_point(1), PUBKEYS, MSGS)


def test_verify_aggregate_length_mismatch():
    agg = aggregate(SIGS, PUBKEYS)
    with pytest.raises(LengthMismatch):
        verify_aggregate(agg, PUBKEYS, MSGS[:2])


def test_verify_aggregate_empty():
    with pytest.raises(EmptyInput):
        verify_aggregate(SIGS[0], [], [])


def test_verify_multi_round_trip():
    msg = b"shared"
    sigs = [sign(sk, msg) for sk in SECRETS]
    agg = aggregate(sigs, PUBKEYS)
    assert verify_multi(agg, PUBKEYS, msg)


def test_verify_multi_tampered():
    msg = b"shared"
    sigs = [sign(sk, msg) for sk in SECRETS]
    agg = aggregate(sigs, PUBKEYS)
    assert not verify_multi(agg, PUBKEYS, b"shares")
    assert not verify_multi(flip_bit(agg), PUBKEYS, msg)
    assert not verify_multi(agg, [PUBKEYS[0], flip_bit(PUBKEYS[1]), PUBKEYS[2]], msg)


def test_verify_multi_does_not_touch_caller_keys():
    msg = b"shared"
    sigs = [sign(sk, msg) for sk in SECRETS]
    keys = list(PUBKEYS)
    agg = aggregate(sigs, keys)
    assert verify_multi(agg, keys, msg)
    assert keys == PUBKEYS
    # same list again still verifies
    assert verify_multi(agg, keys, msg)


def test_verify_multi_identity_key():
    assert not verify_multi(SIGS[0], [g2_identity], MSGS[0])


def test_torsion_key_decodes_outside_subgroup():
    point = g2_from_hex(torsion_key())
    assert not in_subgroup(point)


def test_verify_aggregate_rejects_key_outside_subgroup():
    agg = aggregate(SIGS, PUBKEYS)
    keys = [PUBKEYS[0], torsion_key(), PUBKEYS[2]]
    assert not verify_aggregate(agg, keys, MSGS)


def test_verify_multi_rejects_key_outside_subgroup():
    msg = b"shared"
    sigs = [sign(sk, msg) for sk in SECRETS]
    agg = aggregate(sigs, PUBKEYS)
    assert not verify_multi(agg, [PUBKEYS[0], torsion_key(), PUBKEYS[2]], msg)


def test_keys_are_validated_before_scaling(monkeypatch):
    # scaling by an exponent can clear a torsion component, so nothing is
    # scaled once any caller key is outside the subgroup
    msg = b"shared"
    sigs = [sign(sk, msg) for sk in SECRETS]
    agg = aggregate(sigs, PUBKEYS)
    keys = [PUBKEYS[0], torsion_key(), PUBKEYS[2]]
    scaled = []

    def recording_multiply(point, t):
        scaled.append(t)
        return multiply(point, t)

    monkeypatch.setattr(aggregation_mod, "multiply", recording_multiply)

    assert not verify_multi(agg, keys, msg)
    assert not verify_aggregate(agg, keys, [b"a", b"b", b"c"])
    assert scaled == []


def test_verify_multi_empty():
    with pytest.raises(EmptyInput):
        verify_multi(SIGS[0], [], b"shared")


def test_rogue_key_does_not_forge_hae_multi_signature():
    honest = PUBKEYS[0]
    a = 424242
    rogue = combine(g2_point(a), invert(honest))
    msg = b"transfer everything"
    forgery = sign(a, msg)

    t = derive_exponents([honest, rogue])
    # the keys only cancel when both exponents agree
    assert t[0] != t[1]
    assert not verify_multi(forgery, [honest, rogue], msg)


def test_rogue_key_exponents_change_with_honest_key():
    # a rogue key fixed before the honest key is known cannot predict its exponent
    a = 424242
    first = PUBKEYS[0]
    second = PUBKEYS[1]
    t_first = derive_exponents([first, combine(g2_point(a), invert(first))])
    t_second = derive_exponents([second, combine(g2_point(a), invert(second))])
    assert t_first[1] != t_second[1]


if __name__ == "__main__":
    pytest.main()
