# RandomSource
# (uniform integers from a secure entropy source)
#

import logging
import threading

from . import backend
from .errors import RandomUnavailable

#: Number of bytes fetched from the backend at once
POOL_SIZE = 64

log = logging.getLogger(__name__)


class RandomSource:

    """Cryptographically secure source of uniformly distributed integers.

    Bytes are taken from `randombytes` (default: libsodium through PyNaCl,
    or ``os.urandom``). Any failure of the underlying source is reported
    as :class:`RandomUnavailable`, there is no fallback.

    Instances may be shared between threads.

    """

    def __init__(self, randombytes=None, pool_size: int = POOL_SIZE):
        self._randombytes = randombytes or backend.randombytes
        self._pool_size = pool_size
        self._pool = bytearray()
        self._lock = threading.Lock()
        self._initialized = False

    def init(self):
        """Check that the entropy source works. Returns self.

        :raises RandomUnavailable: if it doesn't

        """
        if self._initialized:
            return self
        self._read(1)
        self._initialized = True
        return self

    def next_in_range(self, lo: int, hi: int) -> int:
        """Return integer uniformly distributed over [lo, hi], inclusive.

        Draws only as many bits as needed to cover the range
        and rejects out-of-range values (no modulo bias).

        """
        if lo > hi:
            raise ValueError(f"Empty range [{lo}, {hi}]")
        span = hi - lo + 1
        if span == 1:
            return lo
        nbits = (span - 1).bit_length()
        nbytes = (nbits + 7) // 8
        mask = (1 << nbits) - 1
        while True:
            value = int.from_bytes(self._draw(nbytes), 'big') & mask
            if value < span:
                return lo + value

    def random_bytes(self, n: int) -> bytes:
        """Return `n` bytes straight from the entropy source, e.g. for a key.

        :raises RandomUnavailable: if the source fails

        """
        return self._read(n)

    def _draw(self, n: int) -> bytes:
        with self._lock:
            if len(self._pool) < n:
                self._pool += self._read(max(n, self._pool_size))
            out = bytes(self._pool[:n])
            # Consumed bytes are not kept around
            self._pool[:n] = bytes(n)
            del self._pool[:n]
        return out

    def _read(self, n: int) -> bytes:
        try:
            data = self._randombytes(n)
        except (OSError, NotImplementedError, backend.MissingError) as e:
            log.debug("Entropy source failed: %s", e)
            raise RandomUnavailable(str(e)) from e
        if len(data) != n:
            raise RandomUnavailable(f"Entropy source returned {len(data)} bytes instead of {n}")
        return data
