"""Vector encoding and similarity helpers.

Vectors are persisted as little-endian IEEE-754 float32 values, concatenated
with no header. The blob is private to the store; the dimension count is kept
alongside it so a truncated blob is detected on read.
"""

import math
from collections.abc import Sequence

import numpy as np

VECTOR_DTYPE = np.dtype("<f4")


def encode_vector(vector: Sequence[float]) -> bytes:
    """Encode a vector as concatenated little-endian float32 values.

    Raises:
        ValueError: If the input is not a flat sequence of numbers.
    """
    try:
        arr = np.asarray(vector, dtype=VECTOR_DTYPE)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Cannot encode vector: {e}") from e
    if arr.ndim != 1:
        raise ValueError(f"Expected a 1-D vector, got shape {arr.shape}")
    return arr.tobytes()


def decode_vector(blob: bytes) -> list[float]:
    """Decode a blob produced by encode_vector back into a list of floats."""
    if len(blob) % VECTOR_DTYPE.itemsize != 0:
        raise ValueError(
            f"Vector blob length {len(blob)} is not a multiple of {VECTOR_DTYPE.itemsize}"
        )
    return np.frombuffer(blob, dtype=VECTOR_DTYPE).tolist()


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Compute cosine similarity between two vectors.

    Returns 0.0 instead of raising or producing NaN when the vectors have
    different lengths, are empty, or either one has zero magnitude.

    Formula: cos(θ) = (a · b) / (||a|| * ||b||)
    """
    if len(a) != len(b) or len(a) == 0:
        return 0.0

    a_arr = np.asarray(a, dtype=np.float64)
    b_arr = np.asarray(b, dtype=np.float64)

    # Squared norms, so sim(a, a) is exactly 1.0: sqrt(x * x) == x in IEEE arithmetic
    norm_a_sq = float(np.dot(a_arr, a_arr))
    norm_b_sq = float(np.dot(b_arr, b_arr))
    if norm_a_sq == 0.0 or norm_b_sq == 0.0:
        return 0.0

    similarity = float(np.dot(a_arr, b_arr)) / math.sqrt(norm_a_sq * norm_b_sq)
    return max(-1.0, min(1.0, similarity))
