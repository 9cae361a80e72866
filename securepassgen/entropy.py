# estimate, crack_time
# (approximate strength in bits)
#

import math

from .charset import CharClass, classify

#: Pool size assumed for each class found in a string of unknown origin
POOL_SIZES = {
    CharClass.LOWER: 26,
    CharClass.UPPER: 26,
    CharClass.DIGIT: 10,
    CharClass.SPECIAL: 32,
}

GUESSES_PER_SECOND = 1e9


def estimate(alphabet_size: int, length: int) -> float:
    """Entropy in bits of `length` characters uniformly drawn from alphabet.

    This is ``length * log2(alphabet_size)``. It doesn't account
    for any patching applied after the draw.

    """
    if alphabet_size <= 0 or length <= 0:
        return 0.0
    return length * math.log2(alphabet_size)


def estimate_text(text: str) -> float:
    """Entropy estimate for a string of unknown origin.

    Alphabet size is derived from character classes present in `text`.

    """
    present = {classify(c) for c in text}
    return estimate(sum(POOL_SIZES[c] for c in present), len(text))


def crack_time(entropy_bits: float, guesses_per_second: float = GUESSES_PER_SECOND) -> float:
    """Seconds needed to search the whole space of `entropy_bits`."""
    if entropy_bits <= 0 or guesses_per_second <= 0:
        return 0.0
    try:
        return 2.0 ** entropy_bits / guesses_per_second
    except OverflowError:
        return math.inf
