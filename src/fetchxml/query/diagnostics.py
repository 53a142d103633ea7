from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .nodes import FetchNode


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass
class Diagnostic:
    code: str
    message: str
    severity: Severity
    element: Optional[str] = None
    attribute: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None


@dataclass
class Diagnostics:
    messages: List[Diagnostic] = field(default_factory=list)

    def add(
        self,
        code: str,
        message: str,
        severity: Severity,
        *,
        element: Optional[str] = None,
        attribute: Optional[str] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> None:
        self.messages.append(
            Diagnostic(
                code=code,
                message=message,
                severity=severity,
                element=element,
                attribute=attribute,
                line=line,
                column=column,
            )
        )

    def warn(self, code: str, message: str, *, element: Optional[str] = None, attribute: Optional[str] = None) -> None:
        self.add(code, message, Severity.WARNING, element=element, attribute=attribute)

    def has_errors(self) -> bool:
        return any(msg.severity == Severity.ERROR for msg in self.messages)

    def warnings(self) -> List[Diagnostic]:
        return [msg for msg in self.messages if msg.severity == Severity.WARNING]

    def errors(self) -> List[Diagnostic]:
        return [msg for msg in self.messages if msg.severity == Severity.ERROR]

    def __len__(self) -> int:
        return len(self.messages)


@dataclass
class ParseResult:
    """Outcome of :func:`fetchxml.query.parser.parse_fetch_xml`.

    ``tree`` is ``None`` whenever ``success`` is false.
    """

    success: bool
    tree: Optional[FetchNode] = None
    errors: List[Diagnostic] = field(default_factory=list)
    warnings: List[Diagnostic] = field(default_factory=list)


@dataclass
class SyntaxCheck:
    valid: bool
    error: Optional[str] = None


__all__ = ["Severity", "Diagnostic", "Diagnostics", "ParseResult", "SyntaxCheck"]
