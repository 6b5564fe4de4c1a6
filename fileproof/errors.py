"""Error taxonomy for fileproof.

Local validation and store errors propagate to the caller. Chain-layer
failures are values (see clients/starknet.py), not exceptions, with the
single exception of UnknownFunction which is a programming error.
"""

from __future__ import annotations


class FileProofError(Exception):
    """Base class for all fileproof errors."""


class InvalidInput(FileProofError, ValueError):
    """Upload rejected before any I/O (empty or oversized content)."""


class ConflictError(FileProofError):
    """Content-addressing violation: the hash is already registered."""

    def __init__(self, message: str, content_hash: str = ""):
        super().__init__(message)
        self.content_hash = content_hash


class DuplicateContent(ConflictError):
    """Raised by the service pre-check when identical bytes exist."""


class StoreConflict(ConflictError):
    """Raised by the record store when its uniqueness constraint rejects an insert."""


class UnknownFunction(FileProofError, LookupError):
    """Contract function name missing from the selector table."""

    def __init__(self, name: str):
        super().__init__(f"Unknown contract function: {name}")
        self.name = name


class MalformedScalar(FileProofError, ValueError):
    """Untrusted numeric input could not be decoded."""
