# pwgen
# (random password generator)
#

import logging

from . import backend
from .charset import CharClass, build_alphabet, class_alphabet, classify
from .entropy import estimate
from .errors import (GenerationError, ValidationError, ConstraintUnsatisfiable,
                     InvalidPatternChar)
from .options import GenerationOptions, MIN_LENGTH, MAX_LENGTH
from .random_source import RandomSource
from .security import SecurityAssessor

MAX_BULK = 100
PATTERN_CODES = {c.value: c for c in CharClass}

log = logging.getLogger(__name__)


class GeneratedPassword:

    """Generated password with its metadata.

    The characters are kept in a bytearray, which is memlocked if possible.
    The owner is responsible for calling :meth:`wipe` when done with it
    (or use the object as a context manager). Note that each access
    to :attr:`password` creates an immutable `str` copy, which cannot
    be wiped. Avoid it where `bytes(...)` is enough.

    """

    def __init__(self, chars: bytearray, entropy: float, assessment):
        self._chars = chars
        self._memory = backend.SecureMemory(chars)
        self._wiped = False
        self.length = len(chars)
        self.entropy = entropy
        self.assessment = assessment

    def __repr__(self):
        return (f"{self.__class__.__name__}(length={self.length}, "
                f"entropy={self.entropy:.1f}, strength={self.strength!r})")

    def __bytes__(self):
        return bytes(self._chars)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.wipe()

    def __del__(self):
        if getattr(self, '_memory', None) is not None:
            self.wipe()

    @property
    def password(self) -> str:
        if self._wiped:
            raise ValueError("Password was wiped")
        return self._chars.decode('ascii')

    @property
    def score(self) -> int:
        return self.assessment.score

    @property
    def category(self):
        return self.assessment.category

    @property
    def strength(self) -> str:
        return self.assessment.category.label

    @property
    def wiped(self) -> bool:
        return self._wiped

    def wipe(self):
        """Overwrite the characters with zeros."""
        self._memory.clear()
        self._wiped = True


class PasswordGenerator:

    """Password generator bound to a random source and an assessor.

    This is the context object passed around by the UI layers.
    No state is shared between calls except the random source.

    """

    def __init__(self, random_source=None, assessor=None,
                 min_length: int = MIN_LENGTH, max_length: int = MAX_LENGTH):
        # min_length may be lowered, max_length never raised
        if not 1 <= min_length <= max_length <= MAX_LENGTH:
            raise ValueError(f"Invalid length bounds {min_length}-{max_length} "
                             f"(allowed 1-{MAX_LENGTH})")
        if random_source is None:
            random_source = RandomSource().init()
        self._random = random_source
        self.assessor = assessor or SecurityAssessor()
        self.min_length = min_length
        self.max_length = max_length

    def validate(self, options: GenerationOptions):
        options.validate(self.min_length, self.max_length)

    def generate(self, options: GenerationOptions) -> GeneratedPassword:
        """Generate a password according to `options`.

        Characters are drawn uniformly from the alphabet of selected
        classes, then minimal requirements are enforced by patching.

        """
        self.validate(options)
        alphabet = build_alphabet(options.lowercase, options.uppercase,
                                  options.digits, options.special,
                                  options.avoid_ambiguous).encode('ascii')
        chars = bytearray(options.length)
        for i in range(options.length):
            chars[i] = self._choice(alphabet)
        patched = self._patch(chars, options)
        log.debug("generated %d characters from alphabet of %d, patched %d",
                  len(chars), len(alphabet), patched)
        return self._result(chars, estimate(len(alphabet), options.length))

    def generate_from_pattern(self, pattern: str) -> GeneratedPassword:
        """Generate a password following `pattern` of class codes.

        Codes: ``l`` lowercase, ``U`` uppercase, ``n`` digit, ``s`` special.
        E.g. "llUnss".

        """
        if not pattern:
            raise ValidationError("Empty pattern")
        classes = []
        for position, code in enumerate(pattern):
            if code not in PATTERN_CODES:
                raise InvalidPatternChar(code, position)
            classes.append(PATTERN_CODES[code])
        chars = bytearray(len(classes))
        for i, char_class in enumerate(classes):
            chars[i] = self._choice(class_alphabet(char_class).encode('ascii'))
        alphabet_size = sum(len(class_alphabet(c)) for c in set(classes))
        return self._result(chars, estimate(alphabet_size, len(chars)))

    def generate_bulk(self, options: GenerationOptions, count: int) -> list:
        """Generate `count` independent passwords.

        On failure, passwords generated so far are wiped
        before the error propagates.

        """
        if not 1 <= count <= MAX_BULK:
            raise ValidationError(f"Count must be between 1 and {MAX_BULK} (got {count})")
        self.validate(options)
        results = []
        try:
            for _ in range(count):
                results.append(self.generate(options))
        except GenerationError:
            for result in results:
                result.wipe()
            raise
        return results

    def _patch(self, chars: bytearray, options: GenerationOptions) -> int:
        """Overwrite some positions to satisfy minimal requirements.

        Works in stages: presence of each selected class (if all are required),
        then minimal digits, then minimal specials. Each stage overwrites
        the lowest-index position which was not patched yet and doesn't
        already hold a character of the wanted class. Stages are repeated
        until a whole pass changes nothing, because a patch may have
        overwritten the only character of an earlier stage's class.

        Returns number of patched positions.

        """
        stages = []
        if options.require_all:
            stages += [(c, 1) for c in options.classes]
        stages += [(CharClass.DIGIT, options.min_digits),
                   (CharClass.SPECIAL, options.min_special)]
        patched = set()
        while True:
            patched_before = len(patched)
            for char_class, minimum in stages:
                while self._count(chars, char_class) < minimum:
                    position = self._patch_position(chars, char_class, patched)
                    alphabet = class_alphabet(char_class, options.avoid_ambiguous)
                    chars[position] = self._choice(alphabet.encode('ascii'))
                    patched.add(position)
            if len(patched) == patched_before:
                return len(patched)

    @staticmethod
    def _count(chars: bytearray, char_class: CharClass) -> int:
        return sum(1 for b in chars if classify(chr(b)) is char_class)

    @staticmethod
    def _patch_position(chars: bytearray, char_class: CharClass, patched: set) -> int:
        for position, b in enumerate(chars):
            if position not in patched and classify(chr(b)) is not char_class:
                return position
        raise ConstraintUnsatisfiable(f"No position left for {char_class.name.lower()} character")

    def _choice(self, alphabet: bytes) -> int:
        return alphabet[self._random.next_in_range(0, len(alphabet) - 1)]

    def _result(self, chars: bytearray, entropy: float) -> GeneratedPassword:
        assessment = self.assessor.assess(chars.decode('ascii'), entropy=entropy)
        return GeneratedPassword(chars, entropy, assessment)
