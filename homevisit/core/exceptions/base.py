"""
ProjectError and exception_factory.

Every error knows its HTTP status and a stable code, so the API's single
ProjectError handler can render any of them. Unsupported services and
blocked dates are results, not errors, and never come through here.
"""
from __future__ import annotations

import traceback
from typing import Any, Dict, Optional, Type


class ProjectError(Exception):
    """
    Root of the homevisit error tree.

    message:     shown to API clients as ``error``
    code:        stable slug clients can branch on (class default_code unless given)
    http_status: status the API responds with (class default_http_status unless given)
    details:     extra JSON-safe context, e.g. the offending query parameter
    cause:       underlying exception; logged, never sent to clients
    """

    default_code: str = "ERROR"
    default_http_status: int = 500

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        http_status: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.http_status = http_status or self.default_http_status
        self.details: Dict[str, Any] = dict(details or {})
        self.cause = cause

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, code={self.code!r}, http_status={self.http_status})"

    def to_response(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message, "code": self.code}
        if self.details:
            body["details"] = self.details
        return body

    def to_dict(self) -> Dict[str, Any]:
        """to_response() plus status and the chained cause, for logs."""
        data = {**self.to_response(), "http_status": self.http_status}
        if self.cause is not None:
            data["cause"] = str(self.cause)
            data["cause_traceback"] = traceback.format_exception(
                type(self.cause), self.cause, self.cause.__traceback__
            )
        return data


def exception_factory(
    name: str,
    *,
    code: Optional[str] = None,
    http_status: int = 500,
    base: Type[ProjectError] = ProjectError,
) -> Type[ProjectError]:
    """
    Declare a ProjectError subclass in one line, e.g. the quota tracker's:

        QuotaUnavailableError = exception_factory(
            "QuotaUnavailableError", code="QUOTA_UNAVAILABLE", base=ExternalServiceError
        )
    """
    attrs = {
        "default_code": code or name.upper(),
        "default_http_status": http_status,
        "__doc__": f"{name} ({code or name.upper()}, HTTP {http_status}).",
    }
    return type(name, (base,), attrs)
