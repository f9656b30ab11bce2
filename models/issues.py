"""Structured validation issues and the aggregate load failure."""

import json
from dataclasses import dataclass
from typing import Any, List, Sequence


def to_printable_value(value: Any) -> str:
    """Render a raw value for an error line: strings verbatim, anything else as JSON."""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False, default=str)


@dataclass(frozen=True)
class ValidationIssue:
    """A single problem found in one community file."""

    file_name: str
    field_path: str
    reason: str
    value: Any = None

    def render(self) -> str:
        return (
            f"[{self.file_name}] {self.field_path}: {self.reason}; "
            f"value={to_printable_value(self.value)}"
        )


class CommunityDataError(ValueError):
    """
    Raised once per load pass when any community file is broken.

    The message lists every issue on its own line so all problems can be
    fixed in one go. The structured issues stay available on ``issues``.
    """

    HEADER = "Community YAML validation failed:"

    def __init__(self, issues: Sequence[ValidationIssue]):
        self.issues: List[ValidationIssue] = list(issues)
        lines = [issue.render() for issue in self.issues]
        super().__init__("\n".join([self.HEADER] + lines))
