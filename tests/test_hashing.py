import io
import zlib

import pytest

from gcnvcs.hashing import (
    compress_stream,
    decompress_stream,
    hash_stream,
    hash_to_path,
    xxh64,
)


def test_xxh64_empty_reference_value():
    assert xxh64(b"") == 0xEF46DB3751D8E999


def test_xxh64_abc_reference_value():
    assert xxh64(b"abc") == 0x44BC2CF5AD770999


def test_xxh64_default_seed_is_zero():
    data = b"some content that is longer than thirty-two bytes in total"
    assert xxh64(data) == xxh64(data, 0)


def test_xxh64_seed_changes_digest():
    assert xxh64(b"abc", 1) != xxh64(b"abc", 0)


def test_xxh64_fits_in_64_bits_for_all_tail_lengths():
    digests = {xxh64(bytes(range(n))) for n in range(0, 80)}
    assert len(digests) == 80
    assert all(0 <= d < 2**64 for d in digests)


def test_hash_stream_matches_direct_hash():
    data = bytes(range(256)) * 40
    assert hash_stream(io.BytesIO(data)) == xxh64(data)


def test_hash_stream_of_empty_stream():
    assert hash_stream(io.BytesIO(b"")) == xxh64(b"")


def test_hash_to_path_splits_decimal_digits():
    assert hash_to_path(12345) == "/12/345"


def test_hash_to_path_rejoins_to_decimal():
    value = xxh64(b"abc")
    path = hash_to_path(value)
    assert path.replace("/", "") == str(value)
    assert path.count("/") == 2


def test_compress_round_trip():
    data = b"line of text\n" * 2000 + bytes(range(256))
    packed = io.BytesIO()
    compress_stream(io.BytesIO(data), packed)
    packed.seek(0)
    out = io.BytesIO()
    decompress_stream(packed, out)
    assert out.getvalue() == data


def test_compressed_output_is_standard_zlib():
    data = b"hello world " * 500
    packed = io.BytesIO()
    compress_stream(io.BytesIO(data), packed)
    assert zlib.decompress(packed.getvalue()) == data


def test_compress_empty_round_trip():
    packed = io.BytesIO()
    compress_stream(io.BytesIO(b""), packed)
    out = io.BytesIO()
    decompress_stream(io.BytesIO(packed.getvalue()), out)
    assert out.getvalue() == b""


def test_decompress_invalid_data_raises():
    with pytest.raises(ValueError):
        decompress_stream(io.BytesIO(b"definitely not a zlib stream"), io.BytesIO())