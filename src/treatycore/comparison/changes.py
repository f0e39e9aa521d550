"""
Change records produced by contract comparison.

A ``Change`` describes one difference between two contract versions and
whether it can break an existing, unmodified consumer.  ``ContractDiff``
collects the changes of one comparison and renders them for humans.

Usage::

    diff = compare(old_contract, new_contract)
    if diff.has_breaking_changes:
        print(diff.summary())
    diff.raise_if_breaking()
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from treatycore.types import ChangeKind, ChangeLocation, ChangeSeverity


class Change(BaseModel):
    """One difference between two contract versions."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: ChangeKind
    severity: ChangeSeverity
    description: str
    location: ChangeLocation = ChangeLocation.ENDPOINT
    method: Optional[str] = None
    path: Optional[str] = None
    field: Optional[str] = Field(
        default=None, description="JSON path inside a body, or header/parameter name"
    )
    old_value: Optional[str] = None
    new_value: Optional[str] = None

    @property
    def endpoint(self) -> str:
        if self.method is None or self.path is None:
            return ""
        return f"{self.method} {self.path}"

    @property
    def is_breaking(self) -> bool:
        return self.severity == ChangeSeverity.BREAKING

    def __str__(self) -> str:
        return f"[{self.severity.value}] {self.description}"


class ContractDiff(BaseModel):
    """All changes between an old and a new contract."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    old_name: str = ""
    new_name: str = ""
    changes: list[Change] = Field(default_factory=list)

    @property
    def breaking_changes(self) -> list[Change]:
        return [c for c in self.changes if c.is_breaking]

    @property
    def non_breaking_changes(self) -> list[Change]:
        return [c for c in self.changes if not c.is_breaking]

    @property
    def has_breaking_changes(self) -> bool:
        return any(c.is_breaking for c in self.changes)

    @property
    def is_compatible(self) -> bool:
        return not self.has_breaking_changes

    def changes_of(self, kind: ChangeKind) -> list[Change]:
        return [c for c in self.changes if c.kind == kind]

    def summary(self) -> str:
        breaking = self.breaking_changes
        non_breaking = self.non_breaking_changes
        lines = [
            f"Contract Comparison: '{self.old_name}' -> '{self.new_name}'",
            f"Total Changes: {len(self.changes)} "
            f"(Breaking: {len(breaking)}, Non-breaking: {len(non_breaking)})",
            "",
        ]
        if breaking:
            lines.append("BREAKING CHANGES:")
            lines.extend(f"  - {c.description}" for c in breaking)
            lines.append("")
        if non_breaking:
            lines.append("NON-BREAKING CHANGES:")
            lines.extend(f"  - {c.description}" for c in non_breaking)
        return "\n".join(lines).rstrip("\n")

    def raise_if_breaking(self) -> None:
        """Raise ``ContractBreakingChangeError`` when any change is breaking."""
        if self.has_breaking_changes:
            raise ContractBreakingChangeError(self)


class ContractBreakingChangeError(Exception):
    """Raised by ``ContractDiff.raise_if_breaking()``."""

    def __init__(self, diff: ContractDiff) -> None:
        self.diff = diff
        breaking = diff.breaking_changes
        details = "\n".join(f"  - {c.description}" for c in breaking)
        super().__init__(f"Contract has {len(breaking)} breaking change(s):\n{details}")
