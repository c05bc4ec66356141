# tests/test_vectors.py
"""Tests for vector encoding and cosine similarity."""

import math

import numpy as np
import pytest

from rulekeeper.vectors import cosine_similarity, decode_vector, encode_vector


class TestEncoding:
    def test_little_endian_float32(self):
        assert encode_vector([1.0]) == b"\x00\x00\x80\x3f"
        assert encode_vector([1.0, -2.0]) == b"\x00\x00\x80\x3f\x00\x00\x00\xc0"

    def test_blob_length(self):
        assert len(encode_vector([0.1] * 768)) == 768 * 4

    def test_decode_restores_values(self):
        vector = [0.5, -0.25, 3.0, 0.0]
        assert decode_vector(encode_vector(vector)) == vector

    @pytest.mark.parametrize("seed", range(5))
    @pytest.mark.parametrize("dimensions", [1, 7, 384, 768])
    def test_random_float32_vectors_survive_bit_exact(self, seed, dimensions):
        rng = np.random.default_rng(seed)
        vector = (rng.standard_normal(dimensions) * 10.0 ** rng.integers(-20, 20)).astype(
            np.float32
        )

        blob = encode_vector(vector.tolist())
        decoded = decode_vector(blob)

        assert decoded == vector.tolist()
        assert encode_vector(decoded) == blob == vector.astype("<f4").tobytes()

    def test_extreme_float32_values_survive(self):
        info = np.finfo(np.float32)
        values = [
            -0.0,
            float(info.max),
            float(-info.max),
            float(info.tiny),
            float(info.smallest_subnormal),
        ]

        blob = encode_vector(values)

        assert encode_vector(decode_vector(blob)) == blob
        assert decode_vector(blob)[1:] == values[1:]

    def test_decode_rejects_truncated_blob(self):
        with pytest.raises(ValueError, match="multiple of 4"):
            decode_vector(b"\x00\x00\x80")

    def test_encode_rejects_nested_input(self):
        with pytest.raises(ValueError):
            encode_vector([[1.0, 2.0], [3.0, 4.0]])

    def test_encode_rejects_non_numbers(self):
        with pytest.raises(ValueError):
            encode_vector(["a", "b"])


class TestCosineSimilarity:
    def test_identical_vectors(self):
        assert cosine_similarity([0.3, 0.4, 0.5], [0.3, 0.4, 0.5]) == 1.0

    def test_orthogonal_vectors(self):
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == 0.0

    def test_opposite_vectors(self):
        assert cosine_similarity([1.0, 2.0], [-1.0, -2.0]) == pytest.approx(-1.0)

    def test_known_angle(self):
        assert cosine_similarity([1.0, 0.0], [1.0, 1.0]) == pytest.approx(1 / math.sqrt(2))

    def test_scale_invariant(self):
        assert cosine_similarity([1.0, 2.0, 3.0], [2.0, 4.0, 6.0]) == pytest.approx(1.0)

    @pytest.mark.parametrize("seed", range(10))
    def test_self_similarity_is_one(self, seed):
        vector = np.random.default_rng(seed).uniform(-1.0, 1.0, 64).tolist()

        assert cosine_similarity(vector, vector) == 1.0

    @pytest.mark.parametrize("seed", range(10))
    def test_symmetric(self, seed):
        rng = np.random.default_rng(seed)
        a = rng.standard_normal(32).tolist()
        b = rng.standard_normal(32).tolist()

        assert cosine_similarity(a, b) == cosine_similarity(b, a)
        assert -1.0 <= cosine_similarity(a, b) <= 1.0

    @pytest.mark.parametrize(
        "a,b",
        [
            ([1.0, 2.0], [1.0, 2.0, 3.0]),
            ([], []),
            ([0.0, 0.0], [1.0, 1.0]),
        ],
    )
    def test_degenerate_inputs_score_zero(self, a, b):
        assert cosine_similarity(a, b) == 0.0
