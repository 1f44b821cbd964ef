"""Custom exceptions for the Gem Farm program module."""

from typing import Optional, Sequence


class GemFarmError(Exception):
    """Base exception for all Gem Farm SDK errors."""

    pass


class DerivationExhaustedError(GemFarmError):
    """Raised when no bump in [0, 255] yields an off-curve address."""

    def __init__(self, seeds: Sequence[bytes], program_id: str):
        self.seeds = list(seeds)
        self.program_id = program_id
        super().__init__(
            f"No viable bump seed for seeds {[s.hex() for s in self.seeds]} "
            f"under program {program_id}"
        )


class MalformedUnionError(GemFarmError):
    """Raised when a tagged-union field has zero or multiple active tags."""

    def __init__(self, keys: Sequence[str]):
        self.keys = list(keys)
        super().__init__(
            f"Malformed tagged union: expected exactly one tag, got {self.keys!r}"
        )


class RemoteRejectionError(GemFarmError):
    """Raised when the cluster or the program declines a transaction."""

    def __init__(self, message: str, signature: Optional[str] = None):
        self.message = message
        self.signature = signature
        if signature:
            super().__init__(f"Transaction {signature} rejected: {message}")
        else:
            super().__init__(f"Transaction rejected: {message}")


class QueryRejectedError(GemFarmError):
    """Raised when the RPC node answers a read-only request with an error."""

    def __init__(self, request: str, message: str):
        self.request = request
        self.message = message
        super().__init__(f"{request} failed: {message}")


class TransportFailureError(GemFarmError):
    """Raised on a network or connection-layer failure."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"Transport failure: {message}")


class InvalidDiscriminatorError(GemFarmError):
    """Raised when account data has an invalid discriminator."""

    def __init__(self, expected: bytes, actual: bytes):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Invalid discriminator: expected {expected!r}, got {actual!r}"
        )


class AccountNotFoundError(GemFarmError):
    """Raised when an account is not found on-chain."""

    def __init__(self, address: str):
        self.address = address
        super().__init__(f"Account not found: {address}")


class InvalidAccountDataError(GemFarmError):
    """Raised when account data cannot be deserialized."""

    def __init__(self, message: str):
        super().__init__(f"Invalid account data: {message}")
