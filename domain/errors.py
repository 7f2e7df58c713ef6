"""Error taxonomy for blob store operations."""


class ShortBlobError(Exception):
    """Base class for all blob store errors."""


class InvalidInputError(ShortBlobError):
    """The request is missing a required field or carries an unusable payload."""


class PayloadTooLargeError(InvalidInputError):
    def __init__(self, limit: int):
        super().__init__(f"Payload exceeds {limit} bytes")
        self.limit = limit


class NotFoundError(ShortBlobError):
    def __init__(self, identifier: str):
        super().__init__(f"No blob stored under {identifier!r}")
        self.identifier = identifier


class StoreUnavailableError(ShortBlobError):
    """The backing key-value store failed to complete an operation."""


class IdentifierCollisionError(ShortBlobError):
    """Two different digests truncate to the same identifier."""

    def __init__(self, identifier: str, existing_digest: str, new_digest: str):
        super().__init__(
            f"Identifier {identifier} already holds digest {existing_digest}, "
            f"refusing to store {new_digest}"
        )
        self.identifier = identifier
        self.existing_digest = existing_digest
        self.new_digest = new_digest
