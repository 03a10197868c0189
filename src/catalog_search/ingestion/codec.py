"""Conversion between embedding vectors and their stored representations.

Every place that writes a vector to a store, or sends one as a query, goes
through this module. A vector is either kept as a JSON array of floats or as
contiguous little-endian float32 bytes, and the two forms of the same vector
decode to the same values.
"""

from collections.abc import Sequence

import numpy as np

from catalog_search.errors import VectorEncodingError
from catalog_search.ingestion.models import VectorEncoding

FLOAT32_LE = np.dtype("<f4")


def to_float32(vector: Sequence[float] | np.ndarray, dim: int | None = None) -> np.ndarray:
    try:
        arr = np.asarray(vector, dtype=FLOAT32_LE)
    except (TypeError, ValueError) as e:
        raise VectorEncodingError(f"vector is not numeric: {e}") from e
    if arr.ndim != 1:
        raise VectorEncodingError(f"expected a 1-D vector, got shape {arr.shape}")
    if dim is not None and arr.shape[0] != dim:
        raise VectorEncodingError(
            f"vector has {arr.shape[0]} dimensions, index declares {dim}"
        )
    return arr


def to_bytes(vector: Sequence[float] | np.ndarray, dim: int | None = None) -> bytes:
    return to_float32(vector, dim).tobytes()


def from_bytes(blob: bytes, dim: int | None = None) -> np.ndarray:
    if len(blob) % FLOAT32_LE.itemsize:
        raise VectorEncodingError(
            f"byte length {len(blob)} is not a multiple of {FLOAT32_LE.itemsize}"
        )
    return to_float32(np.frombuffer(blob, dtype=FLOAT32_LE), dim)


def to_array(vector: Sequence[float] | np.ndarray, dim: int | None = None) -> list[float]:
    return to_float32(vector, dim).tolist()


def encode(
    vector: Sequence[float] | np.ndarray,
    encoding: VectorEncoding,
    dim: int | None = None,
) -> list[float] | bytes:
    if encoding == VectorEncoding.BYTES:
        return to_bytes(vector, dim)
    return to_array(vector, dim)


def decode(
    value: bytes | bytearray | memoryview | Sequence[float] | np.ndarray,
    dim: int | None = None,
) -> np.ndarray:
    """Read a stored vector back, whatever representation it was stored in."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return from_bytes(bytes(value), dim)
    return to_float32(value, dim)
