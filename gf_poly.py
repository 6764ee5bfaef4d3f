"""Polynomials whose coefficients are elements of a GaloisField.

Coefficients are stored highest power first, the same order the codewords of
a symbol arrive in, so a received block can be wrapped directly.
"""

from rs_errors import DomainError


class Polynomial:
    """Immutable polynomial over one GaloisField.

    Leading zeros are stripped on construction; the zero polynomial is [0]
    with degree 0.
    """

    def __init__(self, field, coefficients):
        coefficients = [int(c) for c in coefficients]
        if not coefficients:
            raise DomainError("Polynomial needs at least one coefficient")
        for c in coefficients:
            if c < 0 or c >= field.size:
                raise DomainError(f"Coefficient {c} is not an element of {field!r}")
        first_nonzero = next((i for i, c in enumerate(coefficients) if c != 0), len(coefficients) - 1)
        self.field = field
        self.coefficients = tuple(coefficients[first_nonzero:])

    def __repr__(self):
        if self.is_zero():
            return "0"
        terms = []
        for degree in range(self.degree, -1, -1):
            c = self.coefficient(degree)
            if c == 0:
                continue
            if degree == 0:
                terms.append(str(c))
            elif degree == 1:
                terms.append("x" if c == 1 else f"{c}x")
            else:
                terms.append(f"x^{degree}" if c == 1 else f"{c}x^{degree}")
        return " + ".join(terms)

    def __eq__(self, other):
        if not isinstance(other, Polynomial):
            return NotImplemented
        return self.field is other.field and self.coefficients == other.coefficients

    def __add__(self, other):
        return self.add_or_subtract(other)

    __sub__ = __add__

    def __mul__(self, other):
        if isinstance(other, Polynomial):
            return self.multiply(other)
        return self.multiply_scalar(other)

    def __divmod__(self, other):
        return self.divide(other)

    @property
    def degree(self):
        return len(self.coefficients) - 1

    def is_zero(self):
        return self.coefficients[0] == 0

    def coefficient(self, degree):
        """Coefficient of x^degree (0 beyond the stored range)."""
        if degree < 0 or degree > self.degree:
            return 0
        return self.coefficients[len(self.coefficients) - 1 - degree]

    def evaluate_at(self, a):
        """Horner's rule."""
        if a == 0:
            return self.coefficient(0)
        field = self.field
        if a == 1:
            result = 0
            for c in self.coefficients:
                result ^= c
            return result
        result = 0
        for c in self.coefficients:
            result = field.multiply(result, a) ^ c
        return result

    def _check_field(self, other):
        if self.field is not other.field:
            raise DomainError(f"Polynomials come from different fields: {self.field!r}, {other.field!r}")

    def add_or_subtract(self, other):
        self._check_field(other)
        if self.is_zero():
            return other
        if other.is_zero():
            return self
        smaller, larger = self.coefficients, other.coefficients
        if len(smaller) > len(larger):
            smaller, larger = larger, smaller
        diff = len(larger) - len(smaller)
        summed = list(larger[:diff])
        summed.extend(a ^ b for a, b in zip(smaller, larger[diff:]))
        return Polynomial(self.field, summed)

    def multiply(self, other):
        """Convolution of the coefficient sequences."""
        self._check_field(other)
        if self.is_zero() or other.is_zero():
            return self.field.zero
        field = self.field
        a, b = self.coefficients, other.coefficients
        product = [0] * (len(a) + len(b) - 1)
        for i, ac in enumerate(a):
            if ac == 0:
                continue
            for j, bc in enumerate(b):
                product[i + j] ^= field.multiply(ac, bc)
        return Polynomial(field, product)

    def multiply_scalar(self, scalar):
        if scalar == 0:
            return self.field.zero
        if scalar == 1:
            return self
        return Polynomial(self.field, [self.field.multiply(c, scalar) for c in self.coefficients])

    def multiply_by_monomial(self, degree, coefficient):
        """self * coefficient * x^degree"""
        if degree < 0:
            raise DomainError(f"Negative monomial degree {degree}")
        if coefficient == 0:
            return self.field.zero
        product = [self.field.multiply(c, coefficient) for c in self.coefficients]
        return Polynomial(self.field, product + [0] * degree)

    def divide(self, other):
        """Long division. Returns (quotient, remainder)."""
        self._check_field(other)
        if other.is_zero():
            raise DomainError("Divide by zero polynomial")
        field = self.field
        quotient = field.zero
        remainder = self
        inverse_leading = field.inverse(other.coefficient(other.degree))
        while remainder.degree >= other.degree and not remainder.is_zero():
            degree_diff = remainder.degree - other.degree
            scale = field.multiply(remainder.coefficient(remainder.degree), inverse_leading)
            quotient = quotient.add_or_subtract(field.build_monomial(degree_diff, scale))
            remainder = remainder.add_or_subtract(other.multiply_by_monomial(degree_diff, scale))
        return quotient, remainder

    def formal_derivative(self):
        # Terms of even power vanish in characteristic 2; c * x^k -> c * x^(k-1) for odd k.
        if self.degree == 0:
            return self.field.zero
        derived = [self.coefficient(k) if k % 2 == 1 else 0 for k in range(self.degree, 0, -1)]
        return Polynomial(self.field, derived)
