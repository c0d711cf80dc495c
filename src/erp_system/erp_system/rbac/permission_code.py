from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Union

from ..core.exceptions import ValidationError

ROOT = "_root"
WILDCARD = "*"
_PART_RE = re.compile(r"^[a-z0-9-]+$")


@dataclass(frozen=True)
class PermissionCode:
    """Dotted permission code: module[.resource[.action[.scope]]]."""

    value: str

    def __post_init__(self):
        if not PermissionCode.is_valid(self.value):
            raise ValidationError(f"Invalid permission code: {self.value!r}")

    @classmethod
    def parse(cls, value: Union[str, "PermissionCode"]) -> "PermissionCode":
        if isinstance(value, PermissionCode):
            return value
        return cls(str(value or "").strip())

    @classmethod
    def from_parts(
        cls,
        module: str,
        resource: Optional[str] = None,
        action: Optional[str] = None,
        scope: Optional[str] = None,
    ) -> "PermissionCode":
        parts = [p for p in (module, resource, action, scope) if p is not None]
        return cls(".".join(parts))

    @staticmethod
    def is_valid(value: str) -> bool:
        if not value or not isinstance(value, str):
            return False
        parts = value.split(".")
        if not 1 <= len(parts) <= 4:
            return False
        return all(part == WILDCARD or _PART_RE.match(part) for part in parts)

    @property
    def parts(self) -> List[str]:
        return self.value.split(".")

    @property
    def module(self) -> str:
        return self.parts[0]

    @property
    def resource(self) -> str:
        parts = self.parts
        return parts[1] if len(parts) > 1 else ROOT

    @property
    def action(self) -> str:
        parts = self.parts
        return parts[2] if len(parts) > 2 else ROOT

    @property
    def scope(self) -> Optional[str]:
        parts = self.parts
        return parts[3] if len(parts) > 3 else None

    @property
    def is_wildcard(self) -> bool:
        return WILDCARD in self.parts

    def matches(self, other: Union[str, "PermissionCode"]) -> bool:
        """Exact match, or same length with '*' on either side matching any part."""
        other = PermissionCode.parse(other)
        if self.value == other.value:
            return True
        mine, theirs = self.parts, other.parts
        if len(mine) != len(theirs):
            return False
        return all(a == WILDCARD or b == WILDCARD or a == b for a, b in zip(mine, theirs))

    def __str__(self) -> str:
        return self.value
