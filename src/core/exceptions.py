"""Domain error taxonomy.

Service functions raise these; API views translate them to HTTP responses.
They subclass ``ValueError`` so callers that only know the generic
service-layer contract (``except ValueError``) keep working.
"""


class JourneyError(ValueError):
    """Base class for validation errors raised by the journey/commission core."""

    code = "journey_error"
    status_code = 400

    def __init__(self, message: str = "", **context):
        super().__init__(message)
        self.context = context

    def as_dict(self) -> dict:
        payload = {"detail": str(self), "code": self.code}
        payload.update({k: str(v) for k, v in self.context.items()})
        return payload


class NotFoundError(JourneyError):
    """Unknown customer, milestone, vendor or partner."""

    code = "not_found"
    status_code = 404


class OutOfOrderError(JourneyError):
    """A milestone was completed before all of its predecessors."""

    code = "out_of_order"
    status_code = 409


class AlreadyCompletedError(JourneyError):
    code = "already_completed"
    status_code = 409


class VendorAssignmentFailed(JourneyError):
    """Vendor rejected by the directory or by the assignment constraint."""

    code = "vendor_assignment_failed"
    status_code = 422


class StorageUnavailable(Exception):
    """Storage kept failing after the bounded retries were exhausted."""

    code = "storage_unavailable"
    status_code = 503
