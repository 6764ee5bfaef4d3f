"""Reed-Solomon error correction over a GaloisField.

Decoding follows the Euclidean-algorithm route: syndromes, error locator and
evaluator from the extended Euclidean algorithm, Chien search for the error
locations and Forney's formula for the magnitudes.

A word about capacity: with twoS error-correction codewords at most twoS // 2
errors are corrected. When more errors are present the decoder usually
reports UncorrectableDataError, but if the corrupted block happens to lie
within twoS // 2 symbols of a different valid codeword it is "corrected" to
that codeword. No Reed-Solomon decoder can detect this case.
"""

import threading

from gf_poly import Polynomial
from rs_errors import DomainError, UncorrectableDataError


def compute_syndromes(field, received, two_s):
    """Evaluate the received block at alpha^(base+i), i in [0, twoS).

    Returns the list of syndromes, S_0 first.
    """
    poly = Polynomial(field, received)
    return [poly.evaluate_at(field.exp(i + field.generator_base)) for i in range(two_s)]


def run_euclidean_algorithm(a, b, R):
    """Extended Euclid between a = x^twoS and b = S(x), stopping once deg(r) < R.

    Returns (sigma, omega), normalized so sigma(0) == 1.
    """
    field = a.field
    r_last, r = a, b
    t_last, t = field.zero, field.one

    while r.degree >= R:
        r_last_last, t_last_last = r_last, t_last
        r_last, t_last = r, t

        if r_last.is_zero():
            raise UncorrectableDataError("r_{i-1} was zero")
        # r_{i-2} = q_i * r_{i-1} + r_i
        q, r = divmod(r_last_last, r_last)
        t = q.multiply(t_last).add_or_subtract(t_last_last)

        if r.is_zero():
            raise UncorrectableDataError("Remainder vanished before reaching the degree bound")

    sigma_tilde_at_zero = t.coefficient(0)
    if sigma_tilde_at_zero == 0:
        raise UncorrectableDataError("sigmaTilde(0) was zero")

    inverse = field.inverse(sigma_tilde_at_zero)
    return t.multiply_scalar(inverse), r.multiply_scalar(inverse)


def find_error_locations(error_locator):
    """Chien search. Returns the error locators X_k (inverses of sigma's roots)."""
    field = error_locator.field
    num_errors = error_locator.degree
    locations = []
    for i in range(1, field.size):
        if len(locations) == num_errors:
            break
        if error_locator.evaluate_at(i) == 0:
            locations.append(field.inverse(i))
    if len(locations) != num_errors:
        raise UncorrectableDataError(
            f"Error locator degree {num_errors} does not match number of roots {len(locations)}")
    return locations


def find_error_magnitudes(error_evaluator, error_locator, error_locations):
    """Forney's formula: Y_k = X_k^(1-b) * omega(1/X_k) / sigma'(1/X_k)."""
    field = error_evaluator.field
    derivative = error_locator.formal_derivative()
    magnitudes = []
    for x in error_locations:
        x_inverse = field.inverse(x)
        denominator = derivative.evaluate_at(x_inverse)
        if denominator == 0:
            raise UncorrectableDataError("Error locator derivative vanished at an error location")
        magnitude = field.divide(error_evaluator.evaluate_at(x_inverse), denominator)
        magnitudes.append(field.multiply(magnitude, field.power(x, 1 - field.generator_base)))
    return magnitudes


class ReedSolomonDecoder:
    """Corrects a block of codewords in place."""

    def __init__(self, field):
        self.field = field

    def decode(self, received, two_s):
        """Correct `received` (a mutable sequence) holding twoS EC codewords at the end.

        Returns the number of corrected codewords. On UncorrectableDataError
        `received` is left untouched.
        """
        field = self.field
        n = len(received)
        if two_s < 0 or n <= two_s:
            raise DomainError(f"Need len(received) > twoS >= 0, got {n} and {two_s}")

        syndromes = compute_syndromes(field, received, two_s)
        if not any(syndromes):
            return 0

        syndrome = Polynomial(field, syndromes[::-1])
        sigma, omega = run_euclidean_algorithm(field.build_monomial(two_s, 1), syndrome, two_s // 2)
        if sigma.degree > two_s // 2:
            raise UncorrectableDataError(f"{sigma.degree} errors exceed capacity {two_s // 2}")

        locations = find_error_locations(sigma)
        magnitudes = find_error_magnitudes(omega, sigma, locations)

        corrected = [int(c) for c in received]
        positions = []
        for x, magnitude in zip(locations, magnitudes):
            position = n - 1 - field.log(x)
            if position < 0:
                raise UncorrectableDataError(f"Bad error location {position}")
            corrected[position] = field.add(corrected[position], magnitude)
            positions.append(position)

        if any(compute_syndromes(field, corrected, two_s)):
            raise UncorrectableDataError("Correction left nonzero syndromes")

        for position in positions:
            received[position] = corrected[position]
        return len(positions)


class ReedSolomonEncoder:
    """Appends EC codewords: the remainder of data(x) * x^ec mod g(x)."""

    def __init__(self, field):
        self.field = field
        self._generators = [field.one]
        self._lock = threading.Lock()

    def _build_generator(self, degree):
        with self._lock:
            while len(self._generators) <= degree:
                d = len(self._generators)
                last = self._generators[-1]
                root = self.field.exp(d - 1 + self.field.generator_base)
                self._generators.append(last.multiply(Polynomial(self.field, [1, root])))
            return self._generators[degree]

    def encode(self, to_encode, ec_count):
        """Overwrite the last `ec_count` entries of `to_encode` with EC codewords."""
        if ec_count <= 0:
            raise DomainError("No error correction codewords")
        data_count = len(to_encode) - ec_count
        if data_count <= 0:
            raise DomainError("No data codewords")

        generator = self._build_generator(ec_count)
        info = Polynomial(self.field, to_encode[:data_count]).multiply_by_monomial(ec_count, 1)
        _, remainder = divmod(info, generator)
        coefficients = list(remainder.coefficients) if not remainder.is_zero() else []
        ec = [0] * (ec_count - len(coefficients)) + coefficients
        for i, c in enumerate(ec):
            to_encode[data_count + i] = c
        return to_encode
