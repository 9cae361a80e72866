# backends provided by Python Standard Library

import os
import hashlib
from contextlib import contextmanager
from threading import Timer


randombytes = os.urandom


def keyed_hash(data: bytes, key: bytes) -> bytes:
    return hashlib.blake2b(data, key=key, digest_size=32).digest()


class SecureMemory:

    """Zero the buffer on `clear`, without locking it in RAM.

    Used on platforms with neither mlock nor VirtualLock.

    """

    def __init__(self, data: bytearray):
        self._data = data

    def clear(self):
        self._data[:] = bytes(len(self._data))

    def __bytes__(self):
        return bytes(self._data)

    def __eq__(self, other):
        return bytes(self._data) == bytes(other)


@contextmanager
def timeout(secs: float, handler):
    t = Timer(secs, handler)
    t.start()
    try:
        yield
    finally:
        t.cancel()
