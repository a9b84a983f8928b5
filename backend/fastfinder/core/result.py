"""
Result type shared by every service operation.

Services return ``Ok(payload)`` or ``Err(kind, message)`` instead of raising
to the API layer; ``render_result`` turns either into the single JSON
envelope ``{success, message?, error?, ...payload}``.
"""

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from fastfinder.core.exceptions import FinderError


class ErrorKind(str, enum.Enum):
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    UNVERIFIED = "unverified"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    INTERNAL = "internal"

    @property
    def status_code(self) -> int:
        return _STATUS_BY_KIND[self]


_STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.AUTHENTICATION: 401,
    ErrorKind.UNVERIFIED: 403,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INTERNAL: 500,
}

_KIND_BY_STATUS = {
    400: ErrorKind.VALIDATION,
    401: ErrorKind.AUTHENTICATION,
    404: ErrorKind.NOT_FOUND,
    500: ErrorKind.INTERNAL,
}


@dataclass(frozen=True)
class Ok:
    payload: Dict[str, Any] = field(default_factory=dict)
    message: Optional[str] = None
    # Issued session token; the API layer moves it into the cookie, never the body
    session_token: Optional[str] = None

    success = True


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str
    extra: Dict[str, Any] = field(default_factory=dict)

    success = False

    @property
    def status_code(self) -> int:
        return self.kind.status_code

    @classmethod
    def from_error(cls, error: FinderError, **extra: Any) -> "Err":
        if error.status_code == 403:
            kind = ErrorKind.UNVERIFIED if error.code == "EMAIL_NOT_VERIFIED" else ErrorKind.FORBIDDEN
        else:
            kind = _KIND_BY_STATUS.get(error.status_code, ErrorKind.INTERNAL)
        return cls(kind=kind, message=error.message, extra=extra)


Result = Union[Ok, Err]


def result_body(result: Result) -> Dict[str, Any]:
    """Envelope for a result, without HTTP concerns"""
    if isinstance(result, Ok):
        body: Dict[str, Any] = {"success": True}
        if result.message:
            body["message"] = result.message
        body.update(result.payload)
        return body

    body = {"success": False, "error": result.message}
    body.update(result.extra)
    return body


def render_result(result: Result, status_code: int = 200) -> JSONResponse:
    """Render a result as a JSONResponse; errors use their own status"""
    if isinstance(result, Err):
        status_code = result.status_code
    return JSONResponse(status_code=status_code, content=jsonable_encoder(result_body(result)))
