"""Error kinds raised by the Galois field and Reed-Solomon code."""

from enum import Enum


class ErrorKind(Enum):
    CONFIGURATION = 'configuration'
    DOMAIN = 'domain'
    UNCORRECTABLE = 'uncorrectable'


class ReedSolomonError(ValueError):
    """Base class. `kind` tells callers which of the three failures happened."""
    kind = None


class ConfigurationError(ReedSolomonError):
    """Field parameters do not produce a cyclic multiplicative group."""
    kind = ErrorKind.CONFIGURATION


class DomainError(ReedSolomonError):
    """Log/inverse of zero, division by zero, or a broken call contract."""
    kind = ErrorKind.DOMAIN


class UncorrectableDataError(ReedSolomonError):
    """More errors are present than the error-correction codewords can fix."""
    kind = ErrorKind.UNCORRECTABLE
