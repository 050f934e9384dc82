"""Success/failure envelope returned by service operations."""

import json
from dataclasses import dataclass, field
from typing import Any, Generic, List, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a success carrying ``value`` or a failure carrying ``error``.

    Use :meth:`ok` and :meth:`fail` rather than the constructor. A failure
    may carry ``suggestions``, an ordered list of remediation hints.
    """

    success: bool
    value: Optional[T] = None
    message: Optional[str] = None
    error: Optional[str] = None
    error_context: Optional[str] = None
    suggestions: List[str] = field(default_factory=list)

    def __post_init__(self):
        if self.success and self.error is not None:
            raise ValueError("successful result cannot carry an error")
        if not self.success and (self.error is None or self.value is not None):
            raise ValueError("failed result needs an error and no value")

    @classmethod
    def ok(cls, value: Optional[T] = None, message: Optional[str] = None) -> "Result[T]":
        return cls(success=True, value=value, message=message)

    @classmethod
    def fail(
        cls,
        error: str,
        context: Optional[str] = None,
        suggestions: Optional[List[str]] = None,
    ) -> "Result[T]":
        return cls(
            success=False,
            error=error,
            error_context=context,
            suggestions=list(suggestions) if suggestions else [],
        )

    def __bool__(self) -> bool:
        return self.success

    def to_dict(self) -> dict:
        """Structured rendering; absent fields are omitted."""
        data = {"success": self.success}
        if self.success:
            if self.value is not None:
                data["result"] = _to_jsonable(self.value)
            if self.message is not None:
                data["message"] = self.message
        else:
            data["error"] = self.error
            if self.error_context is not None:
                data["errorContext"] = self.error_context
            data["suggestions"] = list(self.suggestions)
        return data

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def to_plain(self) -> str:
        """Human-readable rendering."""
        if self.success:
            if self.message is not None:
                return self.message
            if self.value is None:
                return "OK"
            if isinstance(self.value, (list, tuple)):
                return "\n".join(str(item) for item in self.value)
            return str(self.value)

        lines = [f"Error: {self.error}"]
        if self.error_context:
            lines.append(f"  {self.error_context}")
        if self.suggestions:
            lines.append("")
            lines.append("Suggestions:")
            lines.extend(f"  - {s}" for s in self.suggestions)
        return "\n".join(lines)


def _to_jsonable(value: Any) -> Any:
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(item) for item in value]
    if isinstance(value, dict):
        return {key: _to_jsonable(item) for key, item in value.items()}
    return value
