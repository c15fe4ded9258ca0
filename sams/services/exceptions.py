"""Service-layer errors, rendered as {"success": false, "error": ...} by the API."""


class AppraisalServiceError(Exception):
    """Base exception for appraisal service errors."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(AppraisalServiceError):
    """A transition precondition is not met. Nothing was written."""

    status_code = 400


class NotAuthorized(AppraisalServiceError):
    """Caller is not the record's appraiser, or not a director."""

    status_code = 403


class RecordNotFound(AppraisalServiceError):
    """Appraisal, user or assignment not found."""

    status_code = 404


class PersistenceFailed(AppraisalServiceError):
    """The database call failed. The transaction was rolled back."""

    status_code = 500
