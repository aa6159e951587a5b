"""SHA-1 implemented in pure Python.

The authorization hashes must match the remote service bit for bit, so the
compression function is written out here instead of delegating to `hashlib`.
The object mirrors the `hashlib` surface (`update`, `digest`, `hexdigest`)
with one difference: an instance can be finalized only once until `reset()`.
"""

from __future__ import annotations

import struct

from core.errors import HashFinalizedError

_MASK = 0xFFFFFFFF
_INITIAL_STATE = (0x67452301, 0xEFCDAB89, 0x98BADCFE, 0x10325476, 0xC3D2E1F0)


def _rotl(value: int, bits: int) -> int:
    return ((value << bits) | (value >> (32 - bits))) & _MASK


class Sha1:
    name = "sha1"
    digest_size = 20
    block_size = 64

    def __init__(self, data: bytes | str | None = None) -> None:
        self.reset()
        if data is not None:
            self.update(data)

    def reset(self) -> None:
        self._state = list(_INITIAL_STATE)
        self._buffer = bytearray()
        self._length = 0
        self._finalized = False

    def update(self, data: bytes | bytearray | str) -> None:
        if self._finalized:
            raise HashFinalizedError("update() after digest(); call reset() first")
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._length += len(data)
        self._absorb(bytes(data))

    def digest(self) -> bytes:
        if self._finalized:
            raise HashFinalizedError("digest() can only be called once per instance")

        bit_length = (self._length * 8) & 0xFFFFFFFFFFFFFFFF
        # 0x80, zeros up to 56 mod 64, then the 64-bit big-endian length.
        padding = b"\x80" + b"\x00" * ((55 - self._length) % 64)
        self._absorb(padding + struct.pack(">Q", bit_length))
        self._finalized = True
        return struct.pack(">5I", *self._state)

    def hexdigest(self) -> str:
        return self.digest().hex()

    def _absorb(self, data: bytes) -> None:
        self._buffer.extend(data)
        usable = len(self._buffer) - (len(self._buffer) % self.block_size)
        for offset in range(0, usable, self.block_size):
            self._compress(self._buffer[offset : offset + self.block_size])
        del self._buffer[:usable]

    def _compress(self, block: bytes | bytearray) -> None:
        w = list(struct.unpack(">16I", block))
        for i in range(16, 80):
            w.append(_rotl(w[i - 3] ^ w[i - 8] ^ w[i - 14] ^ w[i - 16], 1))

        a, b, c, d, e = self._state
        for i in range(80):
            if i < 20:
                f = (b & c) | (~b & d)
                k = 0x5A827999
            elif i < 40:
                f = b ^ c ^ d
                k = 0x6ED9EBA1
            elif i < 60:
                f = (b & c) | (b & d) | (c & d)
                k = 0x8F1BBCDC
            else:
                f = b ^ c ^ d
                k = 0xCA62C1D6

            temp = (_rotl(a, 5) + f + e + k + w[i]) & _MASK
            e = d
            d = c
            c = _rotl(b, 30)
            b = a
            a = temp

        self._state = [(x + y) & _MASK for x, y in zip(self._state, (a, b, c, d, e))]


def sha1_hex(data: bytes | str) -> str:
    """Hex digest en minúsculas (40 caracteres) de `data`."""

    return Sha1(data).hexdigest()
