"""
Tests for Reed-Solomon encoding and Euclidean-algorithm decoding.
"""

import numpy as np
import pytest

from galois_field import (QR_CODE_FIELD_256, DATA_MATRIX_FIELD_256, AZTEC_PARAM,
                          AZTEC_DATA_10)
from gf_poly import Polynomial
from reed_solomon import (ReedSolomonDecoder, ReedSolomonEncoder, compute_syndromes,
                          run_euclidean_algorithm, find_error_locations,
                          find_error_magnitudes)
from rs_errors import DomainError, ErrorKind, UncorrectableDataError

# ISO/IEC 18004 Annex I: "01234567", version 1-M
QR_DATA = [0x10, 0x20, 0x0C, 0x56, 0x61, 0x80, 0xEC, 0x11,
           0xEC, 0x11, 0xEC, 0x11, 0xEC, 0x11, 0xEC, 0x11]
QR_EC = [0xA5, 0x24, 0xD4, 0xC1, 0xED, 0x36, 0xC7, 0x87, 0x2C, 0x55]

# ISO/IEC 16022: "123456"
DM_DATA = [142, 164, 186]
DM_EC = [114, 25, 5, 88, 102]


def corrupt(buffer, count, rng, field_size=256):
    """Change `count` distinct positions to a different value."""
    positions = rng.choice(len(buffer), size=count, replace=False)
    for p in positions:
        buffer[p] = (buffer[p] + int(rng.integers(1, field_size))) % field_size
    return sorted(int(p) for p in positions)


def random_codeword(field, n, two_s, rng):
    buffer = [int(x) for x in rng.integers(0, field.size, size=n - two_s)] + [0] * two_s
    return ReedSolomonEncoder(field).encode(buffer, two_s)


class TestEncoder:

    def test_qr_vector(self):
        buffer = QR_DATA + [0] * len(QR_EC)
        ReedSolomonEncoder(QR_CODE_FIELD_256).encode(buffer, len(QR_EC))
        assert buffer == QR_DATA + QR_EC

    def test_data_matrix_vector(self):
        buffer = DM_DATA + [0] * len(DM_EC)
        ReedSolomonEncoder(DATA_MATRIX_FIELD_256).encode(buffer, len(DM_EC))
        assert buffer == DM_DATA + DM_EC

    def test_encoded_block_has_zero_syndromes(self):
        rng = np.random.default_rng(1)
        buffer = random_codeword(QR_CODE_FIELD_256, 40, 12, rng)
        assert not any(compute_syndromes(QR_CODE_FIELD_256, buffer, 12))

    def test_all_zero_data(self):
        buffer = [0] * 20
        ReedSolomonEncoder(QR_CODE_FIELD_256).encode(buffer, 8)
        assert buffer == [0] * 20

    def test_generator_cache_reused(self):
        encoder = ReedSolomonEncoder(QR_CODE_FIELD_256)
        encoder.encode(QR_DATA + [0] * 10, 10)
        encoder.encode(QR_DATA[:4] + [0] * 4, 4)
        assert encoder._generators[4].degree == 4
        assert encoder._generators[10].degree == 10

    def test_bad_arguments(self):
        encoder = ReedSolomonEncoder(QR_CODE_FIELD_256)
        with pytest.raises(DomainError):
            encoder.encode([1, 2, 3], 0)
        with pytest.raises(DomainError):
            encoder.encode([1, 2, 3], 3)


class TestDecoder:

    def setup_method(self):
        self.decoder = ReedSolomonDecoder(QR_CODE_FIELD_256)

    def test_no_errors(self):
        buffer = QR_DATA + QR_EC
        assert self.decoder.decode(buffer, 10) == 0
        assert buffer == QR_DATA + QR_EC

    def test_zero_ec_codewords(self):
        buffer = [1, 2, 3]
        assert self.decoder.decode(buffer, 0) == 0
        assert buffer == [1, 2, 3]

    def test_five_errors_in_version_1m(self):
        """26 codewords, twoS = 10: five flipped codewords are all restored."""
        original = QR_DATA + QR_EC
        buffer = list(original)
        for pos, value in [(0, 0x00), (5, 0x7F), (13, 0xAB), (20, 0x01), (25, 0xFF)]:
            buffer[pos] = value
        assert self.decoder.decode(buffer, 10) == 5
        assert buffer == original

    @pytest.mark.parametrize('errors', range(0, 6))
    def test_random_errors_within_capacity(self, errors):
        rng = np.random.default_rng(100 + errors)
        for _ in range(20):
            original = random_codeword(QR_CODE_FIELD_256, 26, 10, rng)
            buffer = list(original)
            corrupt(buffer, errors, rng)
            assert self.decoder.decode(buffer, 10) == errors
            assert buffer == original

    def test_error_in_ec_region_only(self):
        buffer = QR_DATA + QR_EC
        buffer[-1] ^= 0x40
        assert self.decoder.decode(buffer, 10) == 1
        assert buffer == QR_DATA + QR_EC

    def test_numpy_buffer_corrected_in_place(self):
        original = np.array(QR_DATA + QR_EC, dtype=np.uint8)
        buffer = original.copy()
        buffer[[2, 9, 17]] ^= np.array([1, 2, 3], dtype=np.uint8)
        assert self.decoder.decode(buffer, 10) == 3
        assert np.array_equal(buffer, original)

    def test_odd_two_s(self):
        rng = np.random.default_rng(5)
        original = random_codeword(QR_CODE_FIELD_256, 30, 7, rng)
        buffer = list(original)
        corrupt(buffer, 3, rng)
        assert self.decoder.decode(buffer, 7) == 3
        assert buffer == original

    def test_one_ec_codeword_detects_only(self):
        buffer = random_codeword(QR_CODE_FIELD_256, 10, 1, np.random.default_rng(3))
        buffer[4] ^= 0x10
        before = list(buffer)
        with pytest.raises(UncorrectableDataError):
            self.decoder.decode(buffer, 1)
        assert buffer == before

    def test_over_capacity_detected(self):
        """Six errors against twoS = 10 fail, leaving the buffer alone.

        A miscorrection onto another codeword is possible in principle; when it
        happens the result must still be a valid, different codeword.
        """
        rng = np.random.default_rng(2024)
        failures, trials = 0, 60
        for _ in range(trials):
            original = random_codeword(QR_CODE_FIELD_256, 26, 10, rng)
            buffer = list(original)
            corrupt(buffer, 6, rng)
            received = list(buffer)
            try:
                self.decoder.decode(buffer, 10)
            except UncorrectableDataError as e:
                assert e.kind is ErrorKind.UNCORRECTABLE
                assert buffer == received
                failures += 1
            else:
                assert buffer != original
                assert not any(compute_syndromes(QR_CODE_FIELD_256, buffer, 10))
        assert failures >= trials * 0.9

    def test_heavy_corruption_never_partially_applied(self):
        rng = np.random.default_rng(99)
        for _ in range(30):
            buffer = [int(x) for x in rng.integers(0, 256, size=26)]
            received = list(buffer)
            try:
                self.decoder.decode(buffer, 10)
            except UncorrectableDataError:
                assert buffer == received
            else:
                assert not any(compute_syndromes(QR_CODE_FIELD_256, buffer, 10))

    def test_preconditions(self):
        with pytest.raises(DomainError):
            self.decoder.decode([1, 2, 3], 3)
        with pytest.raises(DomainError):
            self.decoder.decode([1, 2, 3], -1)
        with pytest.raises(DomainError):
            self.decoder.decode([1, 300, 3], 2)


class TestOtherFields:

    def test_data_matrix_vector_with_errors(self):
        decoder = ReedSolomonDecoder(DATA_MATRIX_FIELD_256)
        buffer = DM_DATA + DM_EC
        buffer[0], buffer[6] = 0, 0
        assert decoder.decode(buffer, 5) == 2
        assert buffer == DM_DATA + DM_EC

    @pytest.mark.parametrize('field, n, two_s', [
        (DATA_MATRIX_FIELD_256, 60, 20),
        (AZTEC_PARAM, 7, 5),
        (AZTEC_DATA_10, 100, 30),
    ])
    def test_random_errors(self, field, n, two_s):
        rng = np.random.default_rng(n)
        decoder = ReedSolomonDecoder(field)
        for errors in range(two_s // 2 + 1):
            original = random_codeword(field, n, two_s, rng)
            buffer = list(original)
            corrupt(buffer, errors, rng, field.size)
            assert decoder.decode(buffer, two_s) == errors
            assert buffer == original


class TestSteps:
    """The individual decoding stages."""

    GF = QR_CODE_FIELD_256

    def test_euclid_single_error(self):
        buffer = QR_DATA + QR_EC
        buffer[3] ^= 0x55
        syndromes = compute_syndromes(self.GF, buffer, 10)
        sigma, omega = run_euclidean_algorithm(
            self.GF.build_monomial(10, 1), Polynomial(self.GF, syndromes[::-1]), 5)
        assert sigma.coefficient(0) == 1
        assert sigma.degree == 1
        assert omega.degree < 5
        # X = alpha^(n-1-position)
        assert find_error_locations(sigma) == [self.GF.exp(len(buffer) - 1 - 3)]
        assert find_error_magnitudes(omega, sigma, find_error_locations(sigma)) == [0x55]

    def test_euclid_zero_remainder(self):
        # S(x) = 3x^2 divides x^4 exactly
        with pytest.raises(UncorrectableDataError):
            run_euclidean_algorithm(self.GF.build_monomial(4, 1), self.GF.build_monomial(2, 3), 2)

    def test_chien_search_requires_full_factorization(self):
        # x^2 + x + c has no roots in GF(256) for half of all c
        for c in range(1, 256):
            candidate = Polynomial(self.GF, [1, 1, c])
            if all(candidate.evaluate_at(x) != 0 for x in range(1, 256)):
                break
        with pytest.raises(UncorrectableDataError):
            find_error_locations(candidate)

    def test_chien_search_finds_every_root(self):
        locators = [self.GF.exp(3), self.GF.exp(10), self.GF.exp(200)]
        sigma = self.GF.one
        for x in locators:
            sigma = sigma * Polynomial(self.GF, [x, 1])  # 1 + X x
        assert sorted(find_error_locations(sigma)) == sorted(locators)

    def test_forney_zero_derivative(self):
        x = self.GF.exp(7)
        sigma = Polynomial(self.GF, [self.GF.multiply(x, x), 0, 1])  # (1 + X x)^2
        with pytest.raises(UncorrectableDataError):
            find_error_magnitudes(self.GF.one, sigma, [x])
