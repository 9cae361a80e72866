# SessionHistory
# (duplicate detection within one session)
#

from . import backend
from .random_source import RandomSource

KEY_SIZE = 32


class SessionHistory:

    """Remember passwords seen during this session, for duplicate detection.

    Only keyed hashes are stored. The key is random and lives only
    in memory, so the history is useless once the process exits.

    Supports ``text in history``, as expected by SecurityAssessor.

    """

    def __init__(self, randombytes=None):
        """:raises RandomUnavailable: if no key can be drawn"""
        self._key = bytearray(RandomSource(randombytes).random_bytes(KEY_SIZE))
        self._digests = set()

    def __len__(self):
        return len(self._digests)

    def __contains__(self, text):
        return self._digest(text) in self._digests

    def add(self, text):
        self._digests.add(self._digest(text))

    def clear(self):
        self._digests.clear()

    def _digest(self, text) -> bytes:
        if isinstance(text, str):
            text = text.encode('utf-8')
        return backend.keyed_hash(bytes(text), bytes(self._key))
