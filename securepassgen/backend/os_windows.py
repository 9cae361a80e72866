import ctypes
from ctypes import windll, cdll, c_void_p, c_size_t, c_int, c_char
import logging

VirtualLock = windll.kernel32.VirtualLock
memset = cdll.msvcrt.memset
log = logging.getLogger(__name__)

err_hint = \
    "(lookup the error code in " \
    "https://docs.microsoft.com/en-us/windows/win32/debug/system-error-codes)"


def memory_lock(addr, size):
    """Try to lock an address against being swapped.

    Encountering error while locking memory is not considered fatal,
    no exception is raised.

    The memory page is locked until the process terminates.
    Calls to VirtualLock do not stack, so SecureMemory never calls
    VirtualUnlock, another instance may still need the page locked.

    """
    try:
        ok = VirtualLock(c_void_p(addr), c_size_t(size))
    except OSError as e:
        log.warning("Unable to lock memory: %s", e)
        return
    if not ok:  # pragma: no cover
        err = windll.kernel32.GetLastError()
        log.warning("Error (VirtualLock): %s %s", err, err_hint)


def memory_clear(addr, size):
    try:
        memset(c_void_p(addr), c_int(0), c_size_t(size))
    except OSError as e:
        log.warning("Unable to clear memory: %s", e)


class SecureMemory:

    """Memlock a bytearray (do not allow swap) and zero it on `clear`."""

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
