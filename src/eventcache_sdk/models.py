"""Pydantic models describing cached events and their persisted records."""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, constr

from .errors import CorruptRecordError

NonEmptyStr = constr(min_length=1)

# Guards against cyclic __cause__/__context__ chains.
_MAX_CAUSE_DEPTH = 16


class ErrorInfo(BaseModel):
    """Serializable description of a failure, with an optional nested cause."""

    kind: str
    message: str = ""
    cause: Optional["ErrorInfo"] = None

    @classmethod
    def from_exception(cls, exc: BaseException, _depth: int = 0) -> "ErrorInfo":
        inner = exc.__cause__ or exc.__context__
        cause = None
        if inner is not None and _depth < _MAX_CAUSE_DEPTH:
            cause = cls.from_exception(inner, _depth + 1)
        return cls(kind=type(exc).__name__, message=str(exc), cause=cause)


class CachedEvent(BaseModel):
    """One buffered unit of work: collection, payload and an optional prior failure.

    The payload is stored under the ``event`` key of the persisted record.
    """

    model_config = ConfigDict(populate_by_name=True)

    collection: NonEmptyStr
    payload: Dict[str, Any] = Field(..., alias="event")
    error: Optional[ErrorInfo] = None

    def to_record(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_record(cls, content: str) -> "CachedEvent":
        try:
            return cls.model_validate_json(content)
        except ValidationError as exc:
            raise CorruptRecordError(f"Invalid cached event record: {exc.error_count()} error(s)") from exc


__all__ = ["CachedEvent", "ErrorInfo"]
