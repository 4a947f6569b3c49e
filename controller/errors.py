"""
Controller error definitions.

Every controller operation fails with a ControllerError carrying one of the
status codes below. The HTTP layer maps the code to a response status.
"""

import enum


class StatusCode(str, enum.Enum):
    """Outcome category of a failed controller call"""
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    OUT_OF_RANGE = "OUT_OF_RANGE"
    NOT_FOUND = "NOT_FOUND"
    FAILED_PRECONDITION = "FAILED_PRECONDITION"
    ABORTED = "ABORTED"
    UNAVAILABLE = "UNAVAILABLE"
    INTERNAL = "INTERNAL"
    UNIMPLEMENTED = "UNIMPLEMENTED"


HTTP_STATUS = {
    StatusCode.INVALID_ARGUMENT: 400,
    StatusCode.OUT_OF_RANGE: 400,
    StatusCode.FAILED_PRECONDITION: 400,
    StatusCode.NOT_FOUND: 404,
    StatusCode.ABORTED: 409,
    StatusCode.INTERNAL: 500,
    StatusCode.UNIMPLEMENTED: 501,
    StatusCode.UNAVAILABLE: 503,
}


class ControllerError(Exception):
    """Failed controller call"""

    def __init__(self, code: StatusCode, message: str = ""):
        super().__init__(message)
        self.code = code
        self.message = message

    @property
    def http_status(self) -> int:
        return HTTP_STATUS.get(self.code, 500)

    def to_dict(self) -> dict:
        return {"code": self.code.value, "message": self.message}

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"


def invalid_argument(message: str) -> ControllerError:
    return ControllerError(StatusCode.INVALID_ARGUMENT, message)


def not_found(message: str) -> ControllerError:
    return ControllerError(StatusCode.NOT_FOUND, message)


def failed_precondition(message: str) -> ControllerError:
    return ControllerError(StatusCode.FAILED_PRECONDITION, message)


def internal(message: str) -> ControllerError:
    return ControllerError(StatusCode.INTERNAL, message)
