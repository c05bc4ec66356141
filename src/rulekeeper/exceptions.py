"""Exception hierarchy for Rulekeeper.

Every error the library raises on purpose derives from RulekeeperError, so
callers can branch on the concrete kind:

- ValidationError: bad input, rejected before any side effect
- ExtractionError: the source document could not be turned into text
- EmbeddingServiceError: the embedding endpoint failed or answered badly
- StorageError: a store transaction failed and was rolled back
- NotFoundError: an unknown game or chunk id was requested
"""


class RulekeeperError(Exception):
    """Base class for all Rulekeeper errors."""


class ValidationError(RulekeeperError):
    """Raised when caller input is rejected (empty upload, not a PDF, ...)."""


class ExtractionError(RulekeeperError):
    """Raised when text cannot be extracted from a source document."""


class EmbeddingServiceError(RulekeeperError):
    """Raised when the embedding service fails or returns a malformed result."""


class StorageError(RulekeeperError):
    """Raised when a store operation fails. The transaction has been rolled back."""


class NotFoundError(RulekeeperError):
    """Raised when a requested game or chunk does not exist.

    Attributes:
        kind: What was looked up ("chunk", "game", ...)
        identifier: The id that was not found
    """

    def __init__(self, kind: str, identifier: object) -> None:
        super().__init__(f"{kind} {identifier} not found")
        self.kind = kind
        self.identifier = identifier
