from fastapi import HTTPException
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_404_NOT_FOUND, HTTP_500_INTERNAL_SERVER_ERROR

class BadRequest(HTTPException):
    def __init__(self, detail: str = "Bad request"):
        super().__init__(status_code=HTTP_400_BAD_REQUEST, detail=detail)

class NotFound(HTTPException):
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=HTTP_404_NOT_FOUND, detail=detail)

class InternalServerError(HTTPException):
    def __init__(self, detail: str = "Internal server error"):
        super().__init__(status_code=HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)

class InterviewNotFound(NotFound):
    def __init__(self, identifier: str = None):
        detail = f"Interview '{identifier}' not found." if identifier else "Interview not found."
        super().__init__(detail=detail)
class InterviewResultNotFound(NotFound):
    def __init__(self, identifier: str = None):
        detail = f"Interview result '{identifier}' not found." if identifier else "Interview result not found."
        super().__init__(detail=detail)
class InvalidState(BadRequest):
    def __init__(self, detail: str = "Record is missing a required reference"):
        super().__init__(detail=detail)
class PersistenceError(InternalServerError):
    def __init__(self, detail: str = "Failed to write to the record store"):
        super().__init__(detail=detail)


class RecordStoreError(Exception):
    """Raised by record store backends when a read or write fails."""


# Interview session errors. These never reach an HTTP response; the session
# controller turns them into user-visible notifications.
class SessionError(Exception):
    """Base class for interview session failures."""
    message = "Interview session error"

    def __init__(self, message: str = None):
        super().__init__(message or self.message)

class PermissionDenied(SessionError):
    message = "Microphone access denied. Please allow microphone access and try again."

class CollaboratorInitFailure(SessionError):
    message = "Audio connection failed. Please try again."

class CollaboratorRuntimeError(SessionError):
    message = "Error during interview"

class InvalidSessionTransition(SessionError):
    message = "Invalid interview session transition"
