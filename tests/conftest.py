import random

import pytest

from securepassgen.pwgen import PasswordGenerator
from securepassgen.security import SecurityAssessor


class SeededSource:

    """Reproducible, NOT secure, random source for tests."""

    def __init__(self, seed=0):
        self._random = random.Random(seed)

    def next_in_range(self, lo, hi):
        return self._random.randint(lo, hi)


class FixedSource:

    """Always returns the lowest value of the range."""

    def next_in_range(self, lo, hi):
        assert lo <= hi
        return lo


@pytest.fixture()
def seeded_source():
    return SeededSource(42)


@pytest.fixture()
def generator(seeded_source):
    return PasswordGenerator(seeded_source, SecurityAssessor())


@pytest.fixture()
def fixed_generator():
    return PasswordGenerator(FixedSource(), SecurityAssessor(), min_length=1)
