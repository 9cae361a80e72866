import ctypes
from ctypes.util import find_library
from ctypes import c_void_p, c_size_t, c_int, c_char
import os
import errno
import logging
import resource
import signal
from contextlib import contextmanager

libc = ctypes.CDLL(find_library("c"), use_errno=True)
log = logging.getLogger(__name__)


def memory_lock(addr, len):
    """Try to lock an address against being swapped.

    Encountering error while locking memory is not considered fatal,
    no exception is raised.

    The memory page is locked until the process terminates.
    We cannot pair mlock/munlock safely without additional page management.
    From linux' mlock(2):
    > Memory locks do not stack, that is, pages which have been locked several times
    > by calls to mlock() or mlockall() will be unlocked by a single call to munlock()
    > for the corresponding range.

    """
    # Set MEMLOCK soft limit to maximum
    limits = resource.getrlimit(resource.RLIMIT_MEMLOCK)
    try:
        resource.setrlimit(resource.RLIMIT_MEMLOCK, (limits[1], limits[1]))
    except (ValueError, OSError) as e:  # pragma: no cover
        log.debug("Cannot raise MEMLOCK soft limit: %s", e)
    try:
        rc = libc.mlock(c_void_p(addr), c_size_t(len))
    except OSError as e:
        log.warning("Unable to lock memory: %s", e)
        return
    if rc == -1:  # pragma: no cover
        err = ctypes.get_errno()
        if err == errno.ENOMEM:
            limit = resource.getrlimit(resource.RLIMIT_MEMLOCK)[1]
            log.warning("Unable to lock memory. "
                        "Consider raising MEMLOCK limit (current %d).", limit)
        else:
            log.warning("Error (mlock): %s %s", errno.errorcode[err], os.strerror(err))


def memory_clear(addr, len):
    try:
        rc = libc.memset(c_void_p(addr), c_int(0), c_size_t(len))
    except OSError as e:
        log.warning("Unable to clear memory: %s", e)
        return
    if rc == -1:  # pragma: no cover
        err = ctypes.get_errno()
        log.warning("Error (memset): %s %s", errno.errorcode[err], os.strerror(err))


class SecureMemory:

    """Memlock a bytearray (do not allow swap) and zero it on `clear`.

    The bytearray is exported to ctypes for the lifetime of this object,
    so it cannot be resized (and moved) in the meantime.

    """

    def __init__(self, data: bytearray):
        self._data = data
        self._view = None
        if len(data):
            self._view = (c_char * len(data)).from_buffer(data)
            memory_lock(ctypes.addressof(self._view), len(data))

    def clear(self):
        if self._view is not None:
            memory_clear(ctypes.addressof(self._view), len(self._data))

    def __bytes__(self):
        return bytes(self._data)

    def __eq__(self, other):
        return bytes(self._data) == bytes(other)


@contextmanager
def timeout(secs: int, handler):
    def sigalrm_handler(_signum, _frame):
        handler()
    orig_handler = signal.signal(signal.SIGALRM, sigalrm_handler)
    signal.alarm(int(secs))
    try:
        yield
    finally:
        signal.alarm(0)
        signal.signal(signal.SIGALRM, orig_handler)
