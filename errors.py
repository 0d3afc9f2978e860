"""Exception taxonomy for the enrichment pipeline.

Propagation policy:
    RequestValidationError aborts a whole batch before any article is touched.
    FetchError and PersistenceError are caught at the enricher boundary and
    reported as failed items. AiServiceError and ParseError never fail an item;
    they are absorbed into a fallback result.

Store implementations raise StoreError (and DocumentNotFoundError for
missing documents); the enricher translates those into the pipeline errors.
"""


class EnrichmentError(Exception):
    """Base class for pipeline errors."""


class RequestValidationError(EnrichmentError):
    """Batch input is missing, empty, or malformed."""


class FetchError(EnrichmentError):
    """The source article could not be retrieved."""


class AiServiceError(EnrichmentError):
    """The AI endpoint failed or returned an unusable envelope.

    Attributes:
        status_code: HTTP status from the endpoint, if one was received
        body: Raw response body, if one was received
    """

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ParseError(EnrichmentError):
    """AI output could not be turned into a summary/analysis pair."""


class PersistenceError(EnrichmentError):
    """Writing the enrichment record failed."""


class StoreError(Exception):
    """A document store operation failed."""


class DocumentNotFoundError(StoreError):
    """The requested document does not exist."""

    def __init__(self, collection: str, document_id: str):
        super().__init__(f"Document '{document_id}' not found in collection '{collection}'")
        self.collection = collection
        self.document_id = document_id
