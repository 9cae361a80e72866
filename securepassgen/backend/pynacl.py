import nacl.utils
import nacl.hash
import nacl.encoding


randombytes = nacl.utils.random


def keyed_hash(data: bytes, key: bytes) -> bytes:
    return nacl.hash.blake2b(data, digest_size=32, key=key,
                             encoder=nacl.encoding.RawEncoder)
