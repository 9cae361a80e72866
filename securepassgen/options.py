# GenerationOptions
# (what kind of password to generate)
#

from typing import NamedTuple

from .charset import CharClass, selected_classes
from .errors import ValidationError

MIN_LENGTH = 8
MAX_LENGTH = 128
DEFAULT_LENGTH = 16


class GenerationOptions(NamedTuple):

    """Immutable password generation options.

    Use ``_replace`` to derive modified options.

    """

    length: int = DEFAULT_LENGTH
    lowercase: bool = True
    uppercase: bool = True
    digits: bool = True
    special: bool = True
    avoid_ambiguous: bool = False
    require_all: bool = True
    min_digits: int = 1
    min_special: int = 1

    @property
    def classes(self) -> tuple:
        """Selected character classes, in fixed order."""
        return selected_classes(self.lowercase, self.uppercase,
                                self.digits, self.special)

    def required_counts(self) -> dict:
        """Minimal number of characters of each class.

        Classes without a requirement are not included.

        """
        required = {}
        if self.require_all:
            for char_class in self.classes:
                required[char_class] = 1
        if self.min_digits > 0:
            required[CharClass.DIGIT] = max(self.min_digits,
                                            required.get(CharClass.DIGIT, 0))
        if self.min_special > 0:
            required[CharClass.SPECIAL] = max(self.min_special,
                                              required.get(CharClass.SPECIAL, 0))
        return required

    def validate(self, min_length=MIN_LENGTH, max_length=MAX_LENGTH):
        """Check invariants, raise ValidationError with the reason."""
        if not min_length <= self.length <= max_length:
            raise ValidationError(f"Length must be between {min_length} and {max_length}"
                                  f" (got {self.length})")
        classes = self.classes
        if not classes:
            raise ValidationError("At least one character class must be selected")
        if self.min_digits < 0 or self.min_special < 0:
            raise ValidationError("Minimal counts cannot be negative")
        if self.min_digits > 0 and not self.digits:
            raise ValidationError("Minimal digit count requires digits to be selected")
        if self.min_special > 0 and not self.special:
            raise ValidationError("Minimal special count requires special characters "
                                  "to be selected")
        if self.min_digits + self.min_special > self.length:
            raise ValidationError(f"Minimal digits and special characters "
                                  f"({self.min_digits} + {self.min_special}) "
                                  f"exceed length {self.length}")
        if self.require_all and self.length < len(classes):
            raise ValidationError(f"Length {self.length} is less than number of "
                                  f"selected types ({len(classes)})")
        required = sum(self.required_counts().values())
        if required > self.length:
            raise ValidationError(f"Requirements ({required} characters) "
                                  f"exceed length {self.length}")
