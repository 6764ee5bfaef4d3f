"""Galois fields GF(2^m) backed by exp/log lookup tables."""

import numpy as np

from gf_poly import Polynomial
from rs_errors import ConfigurationError, DomainError


class GaloisField:
    """GF(size) built from a primitive polynomial and a generator base.

    The generator base is the power of alpha at which the code's generator
    polynomial starts: 0 for QR codes, 1 for Data Matrix and Aztec.
    Tables are read-only once built, so one instance can be shared by any
    number of decoders and threads.
    """

    def __init__(self, size, primitive, generator_base):
        if size < 2 or size & (size - 1):
            raise ConfigurationError(f"Field size {size} is not a power of two")
        if primitive.bit_length() != size.bit_length():
            raise ConfigurationError(
                f"Primitive polynomial {primitive:#x} has the wrong degree for GF({size})")
        self.size = size
        self.primitive = primitive
        self.generator_base = generator_base

        exp_table = np.zeros(size, dtype=np.int64)
        log_table = np.full(size, -1, dtype=np.int64)
        x = 1
        for i in range(size):
            exp_table[i] = x
            x <<= 1
            if x >= size:
                x ^= primitive
                x &= size - 1
        for i in range(size - 1):
            if log_table[exp_table[i]] != -1 or exp_table[i] == 0:
                raise ConfigurationError(
                    f"{primitive:#x} does not generate GF({size}): cycle closed after {i} steps")
            log_table[exp_table[i]] = i
        if exp_table[size - 1] != 1:
            raise ConfigurationError(f"{primitive:#x} does not generate GF({size})")

        exp_table.setflags(write=False)
        log_table.setflags(write=False)
        self._exp = exp_table
        self._log = log_table
        self.zero = Polynomial(self, [0])
        self.one = Polynomial(self, [1])

    def __repr__(self):
        return f"GF(0x{self.primitive:x},{self.size})"

    @staticmethod
    def add(a, b):
        """Addition and subtraction are both XOR in characteristic 2."""
        return a ^ b

    def exp(self, power):
        """alpha ** power"""
        return int(self._exp[power % (self.size - 1)])

    def log(self, a):
        if a == 0:
            raise DomainError("log(0) is undefined")
        return int(self._log[a])

    def inverse(self, a):
        if a == 0:
            raise DomainError("0 has no multiplicative inverse")
        return int(self._exp[self.size - 1 - self._log[a]])

    def multiply(self, a, b):
        if a == 0 or b == 0:
            return 0
        return int(self._exp[(self._log[a] + self._log[b]) % (self.size - 1)])

    def divide(self, a, b):
        if b == 0:
            raise DomainError("Division by zero")
        if a == 0:
            return 0
        return int(self._exp[(self._log[a] - self._log[b] + self.size - 1) % (self.size - 1)])

    def power(self, a, n):
        if a == 0:
            if n <= 0:
                raise DomainError("0 raised to a non-positive power")
            return 0
        return self.exp(self.log(a) * n)

    def build_monomial(self, degree, coefficient):
        """coefficient * x^degree"""
        if degree < 0:
            raise DomainError(f"Negative monomial degree {degree}")
        if coefficient == 0:
            return self.zero
        return Polynomial(self, [coefficient] + [0] * degree)


QR_CODE_FIELD_256 = GaloisField(256, 0x011D, 0)          # x^8 + x^4 + x^3 + x^2 + 1
DATA_MATRIX_FIELD_256 = GaloisField(256, 0x012D, 1)      # x^8 + x^5 + x^3 + x^2 + 1
AZTEC_DATA_12 = GaloisField(4096, 0x1069, 1)             # x^12 + x^6 + x^5 + x^3 + 1
AZTEC_DATA_10 = GaloisField(1024, 0x409, 1)              # x^10 + x^3 + 1
AZTEC_DATA_6 = GaloisField(64, 0x43, 1)                  # x^6 + x + 1
AZTEC_PARAM = GaloisField(16, 0x13, 1)                   # x^4 + x + 1
AZTEC_DATA_8 = DATA_MATRIX_FIELD_256
MAXICODE_FIELD_64 = AZTEC_DATA_6

FIELDS = {
    'qr': QR_CODE_FIELD_256,
    'data_matrix': DATA_MATRIX_FIELD_256,
    'aztec_data_6': AZTEC_DATA_6,
    'aztec_data_8': AZTEC_DATA_8,
    'aztec_data_10': AZTEC_DATA_10,
    'aztec_data_12': AZTEC_DATA_12,
    'aztec_param': AZTEC_PARAM,
    'maxicode': MAXICODE_FIELD_64,
}
