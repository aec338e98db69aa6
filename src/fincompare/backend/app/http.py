"""Problem payloads shared by the Flask blueprints and error handlers."""

from __future__ import annotations

from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, Mapping

from flask import jsonify


@dataclass(frozen=True)
class ProblemResponse:
    """RFC 7807-style error body: a machine-readable code plus a message."""

    error: str
    status: HTTPStatus
    message: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.error, "status": int(self.status)}
        if self.message:
            payload["message"] = self.message
        payload.update(self.extra)
        return payload

    def to_response(self) -> tuple[Any, int]:
        return jsonify(self.as_dict()), int(self.status)


def problem_response(
    error: str,
    *,
    status: HTTPStatus | int,
    message: str | None = None,
    **extra: Any,
) -> ProblemResponse:
    return ProblemResponse(
        error=error, status=HTTPStatus(status), message=message, extra=extra
    )


def not_found(resource: str, identifier: object, **extra: Any) -> ProblemResponse:
    """Problem for an unknown ``resource`` such as a tax year or listing source."""

    return problem_response(
        "not_found",
        status=HTTPStatus.NOT_FOUND,
        message=f"Unknown {resource} '{identifier}'",
        **extra,
    )


__all__ = ["ProblemResponse", "not_found", "problem_response"]
