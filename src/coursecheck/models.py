"""Core domain models for course pages and lint results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

ERROR = "error"
WARNING = "warning"


@dataclass(frozen=True)
class PageSource:
    """One parsed page file before its metadata is validated."""

    path: str
    meta: dict[str, Any]
    body: str


@dataclass(frozen=True)
class Page:
    """Lesson page with normalized front-matter."""

    id: str
    name: str
    dependencies: list[str]
    tags: list[str]
    path: str
    body: str = field(default="", repr=False)


@dataclass(frozen=True)
class Finding:
    """One lint result."""

    code: str
    severity: str
    message: str
    path: str
    page_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "severity": self.severity,
            "message": self.message,
            "path": self.path,
            "page_id": self.page_id,
        }


@dataclass(frozen=True)
class LintReport:
    """Findings for one course directory."""

    root: str
    page_count: int
    findings: tuple[Finding, ...]

    @property
    def errors(self) -> tuple[Finding, ...]:
        return tuple(item for item in self.findings if item.severity == ERROR)

    @property
    def warnings(self) -> tuple[Finding, ...]:
        return tuple(item for item in self.findings if item.severity == WARNING)

    @property
    def ok(self) -> bool:
        """True when the course has no error findings."""
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {
            "root": self.root,
            "page_count": self.page_count,
            "error_count": len(self.errors),
            "warning_count": len(self.warnings),
            "findings": [item.to_dict() for item in self.findings],
        }
