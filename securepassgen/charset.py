# build_alphabet, classify
# (character classes and alphabet composition)
#

import enum
import string

from .errors import EmptyAlphabet

LOWERCASE = string.ascii_lowercase
UPPERCASE = string.ascii_uppercase
DIGITS = string.digits
SPECIAL = '!@#$%^&*'
#: Characters easily confused with each other when displayed
AMBIGUOUS = 'lI1O0'


class CharClass(enum.Enum):

    """Character class. The value is its code in generator patterns."""

    LOWER = 'l'
    UPPER = 'U'
    DIGIT = 'n'
    SPECIAL = 's'


CLASS_CHARS = {
    CharClass.LOWER: LOWERCASE,
    CharClass.UPPER: UPPERCASE,
    CharClass.DIGIT: DIGITS,
    CharClass.SPECIAL: SPECIAL,
}


def class_alphabet(char_class: CharClass, avoid_ambiguous=False) -> str:
    chars = CLASS_CHARS[char_class]
    if avoid_ambiguous:
        chars = ''.join(c for c in chars if c not in AMBIGUOUS)
    return chars


def build_alphabet(lowercase=True, uppercase=True, digits=True, special=True,
                   avoid_ambiguous=False) -> str:
    """Join alphabets of selected classes, in fixed class order.

    :raises EmptyAlphabet: when nothing is left to choose from

    """
    selected = selected_classes(lowercase, uppercase, digits, special)
    alphabet = ''.join(class_alphabet(c, avoid_ambiguous) for c in selected)
    if not alphabet:
        raise EmptyAlphabet("No characters to choose from")
    return alphabet


def selected_classes(lowercase, uppercase, digits, special) -> tuple:
    flags = (lowercase, uppercase, digits, special)
    return tuple(c for c, flag in zip(CharClass, flags) if flag)


def classify(char: str) -> CharClass:
    """Map any character to a class.

    Everything but ASCII letters and digits counts as special.

    """
    if char in LOWERCASE:
        return CharClass.LOWER
    if char in UPPERCASE:
        return CharClass.UPPER
    if char in DIGITS:
        return CharClass.DIGIT
    return CharClass.SPECIAL
