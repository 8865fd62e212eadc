#  This file is part of evocase.
#
#  SPDX-FileCopyrightText: 2019–2025 evocase Contributors
#
#  SPDX-License-Identifier: MIT
#
import string

import hypothesis.strategies as st

from hypothesis import given

import evocase.configuration as config

from evocase.utils import randomness


def test_next_char_printable():
    assert randomness.next_char() in string.printable


def test_next_string_length():
    assert len(randomness.next_string(15)) == 15


def test_next_string_printable():
    assert all(char in string.printable for char in randomness.next_string(15))


def test_next_string_zero():
    assert not randomness.next_string(0)


def test_next_int():
    assert 0 <= randomness.next_int(0, 50) < 50


def test_next_int_default_bounds():
    assert -100 <= randomness.next_int() < 100


def test_next_float():
    assert 0 <= randomness.next_float() <= 1


def test_next_float_bounds():
    assert 2.5 <= randomness.next_float(2.5, 3.5) <= 3.5


def test_next_gaussian():
    assert isinstance(randomness.next_gaussian(), float)


def test_next_bool():
    assert isinstance(randomness.next_bool(), bool)


def test_next_bytes_zero():
    assert randomness.next_bytes(0) == b""


def test_next_bytes_fixed():
    assert len(randomness.next_bytes(15)) == 15


def test_choice():
    assert randomness.choice(["a", "b", "c"]) in {"a", "b", "c"}


def test_shuffled():
    sequence = [1, 2, 3]
    result = randomness.shuffled(sequence)
    assert sorted(result) == [1, 2, 3]
    assert sequence == [1, 2, 3]


def test_get_seed():
    rng = randomness.Random()
    assert rng.get_seed() != 0


@given(st.integers())
def test_set_get_seed(seed):
    rng = randomness.Random()
    rng.seed(seed)
    assert rng.get_seed() == seed


def test_seed_from_configuration():
    config.configuration.seed = 1234
    assert randomness.seed_from_configuration() == 1234
    first = [randomness.next_int(0, 1000) for _ in range(10)]
    randomness.seed_from_configuration()
    assert [randomness.next_int(0, 1000) for _ in range(10)] == first


def test_seed_from_configuration_without_seed():
    config.configuration.seed = None
    assert randomness.seed_from_configuration() is not None
