"""
DropForge - Exceptions

This module defines the error taxonomy shared by the publish pipeline,
the ledger read side and the transaction assembler.
"""

from typing import Optional


class DropForgeError(Exception):
    """Base exception for all DropForge errors."""
    pass


# Blob store

class BlobStoreError(DropForgeError):
    """Base exception for blob store operations."""
    pass


class StoreUnavailable(BlobStoreError):
    """Raised when the blob store cannot be reached or fails server-side."""
    pass


class StoreRejected(BlobStoreError):
    """Raised when the blob store refuses an upload (e.g. oversize)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class NotFound(DropForgeError):
    """Raised when a blob or ledger object does not exist."""

    def __init__(self, identifier: str, message: str = None):
        self.identifier = identifier
        if message is None:
            message = f"Not found: {identifier}"
        super().__init__(message)


# Publishing

class PublishError(DropForgeError):
    """Base exception for asset publishing."""
    pass


class VerificationFailed(PublishError):
    """Raised when the read-back check for an uploaded asset fails."""

    def __init__(self, index: int, blob_id: Optional[str] = None, message: str = None):
        self.index = index
        self.blob_id = blob_id
        if message is None:
            message = f"Verification failed for asset {index}"
            if blob_id:
                message += f" (blob {blob_id})"
        super().__init__(message)


class ManifestIntegrityError(PublishError):
    """Raised when the uploaded manifest does not match the local one."""
    pass


class ManifestEmpty(DropForgeError):
    """Raised when a fetched manifest is empty or not a JSON array."""
    pass


# Ledger read side

class UnrecognizedValueShape(DropForgeError):
    """Raised when a ledger value matches none of the known shapes."""
    pass


class RegistryError(DropForgeError):
    """Base exception for registry resolution."""
    pass


class RegistryUnavailable(RegistryError):
    """Raised when the registry object cannot be read."""
    pass


class RegistryMalformed(RegistryError):
    """Raised when the registry table or an account entry in it is malformed."""

    def __init__(self, registry_id: str, field: str, message: str = None):
        self.registry_id = registry_id
        self.field = field
        if message is None:
            message = f"Registry {registry_id} is malformed: missing '{field}'"
        super().__init__(message)


class CollectionMalformed(DropForgeError):
    """Raised when a collection object lacks a required field."""

    def __init__(self, object_id: str, field: str, message: str = None):
        self.object_id = object_id
        self.field = field
        if message is None:
            message = f"Collection {object_id} is malformed: missing or invalid '{field}'"
        super().__init__(message)


class ConsistencyWarning(UserWarning):
    """
    Non-fatal inconsistency between a collection record and its manifest.

    Collected on reconstruction results and logged; never raised.
    """

    def __init__(self, object_id: str, message: str):
        self.object_id = object_id
        self.message = message
        super().__init__(f"{object_id}: {message}")


# Transactions

class TransactionError(DropForgeError):
    """Base exception for transaction assembly and submission."""
    pass


class TransactionAssemblyError(TransactionError):
    """Raised when transaction parameters are invalid."""
    pass


class TransactionFailed(TransactionError):
    """Raised when the ledger rejects or fails to confirm a submission."""

    def __init__(self, message: str, digest: Optional[str] = None):
        self.digest = digest
        super().__init__(message)
