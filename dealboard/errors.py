"""Error types for the record store and the pipeline controller."""

from __future__ import annotations


class StoreError(Exception):
    """Base exception for record store failures."""

    def __init__(self, message: str, collection: str | None = None, record_id: str | None = None):
        self.message = message
        self.collection = collection
        self.record_id = record_id
        super().__init__(self.message)


class RecordNotFoundError(StoreError):
    """Update targeted a record id the collection does not hold."""

    pass


class PipelineError(Exception):
    """Base for the typed failures a pipeline operation resolves with."""

    code = "pipeline_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class LoadFailure(PipelineError):
    """Primary deal fetch failed."""

    code = "load_failed"


class ValidationFailure(PipelineError):
    """Required input missing or malformed."""

    code = "validation_failed"


class NotFound(PipelineError):
    """Operation referenced a deal id absent from the in-memory arena."""

    code = "not_found"

    def __init__(self, deal_id: str):
        self.deal_id = deal_id
        super().__init__(f"Deal {deal_id!r} is not loaded")


class RemoteFailure(PipelineError):
    """The record store rejected a call."""

    code = "remote_failed"

    def __init__(self, message: str, cause: BaseException | None = None):
        self.cause = cause
        super().__init__(message)


class UnknownStageError(PipelineError):
    """A record carries a status outside the four pipeline stages."""

    code = "unknown_stage"

    def __init__(self, value: object, deal_id: str | None = None):
        self.value = value
        self.deal_id = deal_id
        super().__init__(f"Unrecognized stage {value!r}")
