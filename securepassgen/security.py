# SecurityAssessor
# (heuristic password strength assessment)
#

import enum
import logging
from typing import NamedTuple

from .charset import CharClass, classify
from .entropy import estimate_text, crack_time, GUESSES_PER_SECOND

log = logging.getLogger(__name__)

#: Literal substrings which make a password weak (case-sensitive)
WEAK_PATTERNS = (
    ('123', "Sequential numbers"),
    ('abc', "Sequential letters"),
    ('qwerty', "Keyboard pattern"),
    ('password', "Common word"),
    ('admin', "Common word"),
    ('letmein', "Common phrase"),
    ('welcome', "Common word"),
    ('monkey', "Common word"),
    ('dragon', "Common word"),
    ('baseball', "Common word"),
    ('football', "Common word"),
    ('mustang', "Common word"),
    ('master', "Common word"),
    ('hello', "Common word"),
    ('secret', "Common word"),
    ('asdf', "Keyboard pattern"),
    ('zxcv', "Keyboard pattern"),
    ('111', "Repeated numbers"),
    ('aaa', "Repeated letters"),
    ('000', "Repeated numbers"),
)

KEYBOARD_ROWS = (
    'qwertyuiop',
    'asdfghjkl',
    'zxcvbnm',
    '1234567890',
)

#: Most common passwords, matched as lowercase substrings
DICTIONARY_WORDS = (
    "password", "123456", "12345678", "1234", "qwerty",
    "12345", "dragon", "pussy", "baseball", "football",
    "letmein", "monkey", "696969", "abc123", "mustang",
    "michael", "shadow", "master", "jennifer", "111111",
    "2000", "jordan", "superman", "harley", "1234567",
    "fuckme", "hunter", "fuckyou", "trustno1", "ranger",
    "buster", "thomas", "tigger", "robert", "soccer",
    "fuck", "batman", "test", "pass", "killer",
    "hockey", "george", "charlie", "andrew", "michelle",
    "love", "sunshine", "jessica", "pepper", "daniel",
    "access", "123456789", "654321", "joshua", "maggie",
    "starwars", "silver", "william", "dallas", "yankees",
    "123123", "ashley", "666666", "hello", "amanda",
    "orange", "biteme", "freedom", "computer", "sexy",
    "thunder", "nicole", "ginger", "heather", "hammer",
    "summer", "corvette", "taylor", "fucker", "austin",
    "1111", "merlin", "matthew", "121212", "golfer",
    "cheese", "princess", "martin", "chelsea", "patrick",
    "richard", "diamond", "yellow", "bigdog", "secret",
    "asdfgh", "sparky", "cowboy",
)

LETTERS = (CharClass.LOWER, CharClass.UPPER)

LEET_TABLE = str.maketrans({
    '4': 'a', '3': 'e', '0': 'o', '1': 'i', '5': 's',
    '7': 't', '@': 'a', '$': 's', '!': 'i',
})


class StrengthCategory(enum.IntEnum):

    VERY_WEAK = 0
    WEAK = 1
    FAIR = 2
    GOOD = 3
    STRONG = 4
    VERY_STRONG = 5

    @classmethod
    def from_score(cls, score: int) -> 'StrengthCategory':
        return cls(min(score // 20, cls.VERY_STRONG))

    @property
    def label(self) -> str:
        return self.name.replace('_', ' ').title()


class SecurityAssessment(NamedTuple):
    score: int = 0
    category: StrengthCategory = StrengthCategory.VERY_WEAK
    entropy: float = 0.0
    crack_time: float = 0.0
    has_weak_pattern: bool = False
    has_dictionary_word: bool = False
    is_duplicate: bool = False


def strength_score(text: str) -> int:
    """Score 0-100 from length and character variety, without penalties."""
    length = len(text)
    if length == 0:
        return 0
    if length >= 12:
        score = 40
    elif length >= 10:
        score = 30
    elif length >= 8:
        score = 20
    else:
        score = 10
    present = {classify(c) for c in text}
    score += 10 * len(present)
    # Numbers or symbols in the middle
    if any(classify(c) not in LETTERS for c in text[1:-1]):
        score += 10
    if length >= 8 and {CharClass.LOWER, CharClass.UPPER, CharClass.DIGIT} <= present:
        score += 10
    return max(0, min(score, 100))


def _is_run(a: int, b: int, c: int) -> bool:
    return (a + 1 == b and b + 1 == c) or (a - 1 == b and b - 1 == c)


def has_weak_pattern(text: str) -> bool:
    """Check for known weak substrings, runs, repeats and keyboard walks."""
    if any(pattern in text for pattern, _description in WEAK_PATTERNS):
        return True
    for c1, c2, c3 in zip(text, text[1:], text[2:]):
        triple = c1 + c2 + c3
        # 123, 654
        if triple.isdecimal() and triple.isascii() and _is_run(*map(ord, triple)):
            return True
        # abc, ZYX, aBc
        if triple.isalpha() and triple.isascii() and _is_run(*map(ord, triple.lower())):
            return True
        # aaa, 111
        if c1 == c2 == c3:
            return True
    for row in KEYBOARD_ROWS:
        for i in range(len(row) - 2):
            walk = row[i:i + 3]
            if walk in text or walk[::-1] in text:
                return True
    return False


def leet_normalize(text: str) -> str:
    return text.translate(LEET_TABLE)


def has_dictionary_word(text: str) -> bool:
    """Check for common passwords, also in leet-speak disguise."""
    lower = text.lower()
    if any(word in lower for word in DICTIONARY_WORDS):
        return True
    leet = leet_normalize(lower)
    return any(word in leet for word in DICTIONARY_WORDS)


def format_crack_time(seconds: float) -> str:
    """Format crack time using the largest fitting unit."""
    for unit, size in (('years', 31536000), ('days', 86400),
                       ('hours', 3600), ('minutes', 60)):
        if seconds > size:
            return f"{seconds / size:.1f} {unit}"
    return f"{seconds:.1f} seconds"


class SecurityAssessor:

    """Combine the heuristics into a single assessment.

    `history` is an optional collaborator supporting ``text in history``,
    used for duplicate detection. The assessor itself remembers nothing.

    """

    def __init__(self, guesses_per_second: float = GUESSES_PER_SECOND, history=None):
        self.guesses_per_second = guesses_per_second
        self.history = history

    def assess(self, text: str, entropy: float = None) -> SecurityAssessment:
        """Assess `text`.

        :param entropy: Entropy in bits, when known from the generator.
                        Estimated from `text` otherwise.

        """
        if not text:
            return SecurityAssessment()
        score = strength_score(text)
        weak = has_weak_pattern(text)
        dictionary = has_dictionary_word(text)
        if weak:
            score = max(0, min(score * 70 // 100, 100))
        if dictionary:
            score = max(0, min(score * 60 // 100, 100))
        if entropy is None:
            entropy = estimate_text(text)
        duplicate = self.history is not None and text in self.history
        log.debug("assessed %d characters: score=%d weak=%s dictionary=%s",
                  len(text), score, weak, dictionary)
        return SecurityAssessment(
            score=score,
            category=StrengthCategory.from_score(score),
            entropy=entropy,
            crack_time=crack_time(entropy, self.guesses_per_second),
            has_weak_pattern=weak,
            has_dictionary_word=dictionary,
            is_duplicate=duplicate,
        )
