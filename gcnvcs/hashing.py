"""XXH64 hashing, object path layout and zlib stream helpers."""

from __future__ import annotations

import struct
import zlib
from functools import partial
from typing import BinaryIO

CHUNK_SIZE = 4096

_MASK = 0xFFFFFFFFFFFFFFFF
_P1 = 11400714785074694791
_P2 = 14029467366897019727
_P3 = 1609587929392839161
_P4 = 9650029242287828579
_P5 = 2870177450012600261


def _rotl(value: int, bits: int) -> int:
    return ((value << bits) | (value >> (64 - bits))) & _MASK


def _round(acc: int, lane: int) -> int:
    acc = (acc + lane * _P2) & _MASK
    return (_rotl(acc, 31) * _P1) & _MASK


def _merge(acc: int, value: int) -> int:
    acc ^= _round(0, value)
    return (acc * _P1 + _P4) & _MASK


def xxh64(data: bytes, seed: int = 0) -> int:
    """Return the 64-bit XXH64 digest of ``data``."""
    data = bytes(data)
    length = len(data)
    seed &= _MASK
    stripes_end = length - length % 32

    if length >= 32:
        v1 = (seed + _P1 + _P2) & _MASK
        v2 = (seed + _P2) & _MASK
        v3 = seed
        v4 = (seed - _P1) & _MASK
        for a, b, c, d in struct.iter_unpack("<4Q", data[:stripes_end]):
            v1 = _round(v1, a)
            v2 = _round(v2, b)
            v3 = _round(v3, c)
            v4 = _round(v4, d)
        acc = (_rotl(v1, 1) + _rotl(v2, 7) + _rotl(v3, 12) + _rotl(v4, 18)) & _MASK
        for value in (v1, v2, v3, v4):
            acc = _merge(acc, value)
    else:
        acc = (seed + _P5) & _MASK

    acc = (acc + length) & _MASK

    tail = data[stripes_end:]
    lanes_end = len(tail) - len(tail) % 8
    for (lane,) in struct.iter_unpack("<Q", tail[:lanes_end]):
        acc ^= _round(0, lane)
        acc = (_rotl(acc, 27) * _P1 + _P4) & _MASK

    rest = tail[lanes_end:]
    if len(rest) >= 4:
        (word,) = struct.unpack_from("<I", rest)
        acc ^= (word * _P1) & _MASK
        acc = (_rotl(acc, 23) * _P2 + _P3) & _MASK
        rest = rest[4:]
    for byte in rest:
        acc ^= (byte * _P5) & _MASK
        acc = (_rotl(acc, 11) * _P1) & _MASK

    acc ^= acc >> 33
    acc = (acc * _P2) & _MASK
    acc ^= acc >> 29
    acc = (acc * _P3) & _MASK
    acc ^= acc >> 32
    return acc


def hash_stream(stream: BinaryIO) -> int:
    """Hash everything remaining in a binary stream with XXH64 (seed 0)."""
    content = b"".join(iter(partial(stream.read, CHUNK_SIZE), b""))
    return xxh64(content)


def hash_to_path(value: int) -> str:
    """Return the object path suffix for a hash: ``/<first two digits>/<rest>``."""
    digits = str(value)
    return f"/{digits[:2]}/{digits[2:]}"


def compress_stream(source: BinaryIO, target: BinaryIO) -> None:
    """Deflate ``source`` into ``target`` as a zlib stream."""
    compressor = zlib.compressobj(zlib.Z_DEFAULT_COMPRESSION)
    for chunk in iter(partial(source.read, CHUNK_SIZE), b""):
        target.write(compressor.compress(chunk))
    target.write(compressor.flush())


def decompress_stream(source: BinaryIO, target: BinaryIO) -> None:
    """Inflate the zlib stream in ``source`` into ``target``.

    Raises ValueError if the data is not a valid zlib stream.
    """
    decompressor = zlib.decompressobj()
    try:
        for chunk in iter(partial(source.read, CHUNK_SIZE), b""):
            target.write(decompressor.decompress(chunk))
            if decompressor.eof:
                break
        target.write(decompressor.flush())
    except zlib.error as exc:
        raise ValueError("inflate failed") from exc