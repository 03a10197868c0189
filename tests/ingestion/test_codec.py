import struct

import numpy as np
import pytest

from catalog_search.errors import VectorEncodingError
from catalog_search.ingestion import codec
from catalog_search.ingestion.models import VectorEncoding


def make_unit_vector(dim: int = 384, seed: int = 7) -> np.ndarray:
    rng = np.random.default_rng(seed)
    vector = rng.normal(size=dim).astype(np.float32)
    return vector / np.linalg.norm(vector)


def test_bytes_are_little_endian_float32():
    assert codec.to_bytes([1.0, -2.5]) == struct.pack("<2f", 1.0, -2.5)
    assert codec.to_bytes([1.0]) == b"\x00\x00\x80\x3f"


def test_bytes_round_trip_within_tolerance():
    vector = make_unit_vector()
    decoded = codec.from_bytes(codec.to_bytes(vector), dim=384)
    assert decoded.dtype == np.float32
    np.testing.assert_allclose(decoded, vector, atol=1e-6)


def test_array_and_bytes_representations_are_interchangeable():
    vector = make_unit_vector(seed=11)
    as_array = codec.encode(vector, VectorEncoding.ARRAY, dim=384)
    as_bytes = codec.encode(vector, VectorEncoding.BYTES, dim=384)

    assert isinstance(as_array, list)
    assert all(isinstance(x, float) for x in as_array)
    assert isinstance(as_bytes, bytes)
    assert len(as_bytes) == 384 * 4
    np.testing.assert_allclose(codec.decode(as_array), codec.decode(as_bytes), atol=1e-6)


def test_decode_accepts_memoryview():
    vector = make_unit_vector(dim=8)
    decoded = codec.decode(memoryview(codec.to_bytes(vector)))
    np.testing.assert_allclose(decoded, vector, atol=1e-6)


def test_dimension_mismatch_is_rejected():
    with pytest.raises(VectorEncodingError):
        codec.to_array([0.1, 0.2, 0.3], dim=384)
    with pytest.raises(VectorEncodingError):
        codec.from_bytes(codec.to_bytes([0.1, 0.2]), dim=3)


def test_non_vector_input_is_rejected():
    with pytest.raises(VectorEncodingError):
        codec.to_float32([[0.1, 0.2], [0.3, 0.4]])
    with pytest.raises(VectorEncodingError):
        codec.to_float32(["not", "numbers"])


def test_truncated_bytes_are_rejected():
    blob = codec.to_bytes([0.5, 0.25])
    with pytest.raises(VectorEncodingError):
        codec.from_bytes(blob[:-1])


def test_encoding_error_is_a_value_error():
    assert issubclass(VectorEncodingError, ValueError)
