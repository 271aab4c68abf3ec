"""
TWL Matching Exception Hierarchy

Structured errors raised while building a term index. Scanning and
output assembly never raise on verse content.
"""
from dataclasses import dataclass
from typing import Any, List


class TWLError(Exception):
    """
    Base class for term matching errors

    Attributes:
        message: Human-readable error message
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return self.message


@dataclass
class TermIssue:
    """A single problem found in a dictionary entry"""
    term: Any
    reason: str

    def __str__(self):
        return f"{self.term!r}: {self.reason}"


class TermValidationError(TWLError, ValueError):
    """
    One or more dictionary entries are not valid terms

    Examples: empty term, punctuation-only term, empty article list
    """

    def __init__(self, issues: List[TermIssue]):
        self.issues = list(issues)
        shown = "; ".join(str(issue) for issue in self.issues[:10])
        if len(self.issues) > 10:
            shown += f"; ... ({len(self.issues) - 10} more)"
        super().__init__(f"Invalid term dictionary ({len(self.issues)} issue(s)): {shown}")
