# GenerationError and friends
# (error taxonomy of the generator core)
#


class GenerationError(Exception):

    """Base class for all errors raised by the generator core."""


class ValidationError(GenerationError):

    """Options (or a pattern) are malformed. Reported immediately, no retry."""

    def __init__(self, reason):
        GenerationError.__init__(self, reason)
        self.reason = reason


class RandomUnavailable(GenerationError):

    """The secure entropy source cannot be used.

    There is no fallback to a weaker generator.

    """


class EmptyAlphabet(GenerationError):

    """No characters left to choose from."""


class ConstraintUnsatisfiable(GenerationError):

    """Patching ran out of positions.

    This can happen only if validation let through impossible options,
    i.e. it indicates a bug.

    """


class InvalidPatternChar(GenerationError):

    def __init__(self, code, position):
        GenerationError.__init__(
            self, f"Invalid pattern character {code!r} at position {position}")
        self.code = code
        self.position = position
