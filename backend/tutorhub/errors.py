"""Error taxonomy shared by services and routers.

Each kind is an HTTPException so services can raise it directly; the body is
``{"kind": ..., "message": ...}`` so clients can branch on the kind.
"""
from fastapi import HTTPException, status


class EnrollmentError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    kind = "internal"

    def __init__(self, message: str):
        self.message = message
        super().__init__(status_code=self.status_code, detail={"kind": self.kind, "message": message})


class NotFound(EnrollmentError):
    status_code = status.HTTP_404_NOT_FOUND
    kind = "not_found"


class InvalidState(EnrollmentError):
    status_code = status.HTTP_400_BAD_REQUEST
    kind = "invalid_state"


class CapacityExceeded(EnrollmentError):
    status_code = status.HTTP_409_CONFLICT
    kind = "capacity_exceeded"


class Forbidden(EnrollmentError):
    status_code = status.HTTP_403_FORBIDDEN
    kind = "forbidden"


class InternalFailure(EnrollmentError):
    pass
