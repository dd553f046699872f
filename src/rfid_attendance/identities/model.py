from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Role


@dataclass(frozen=True)
class Identity:
    """Domain entity: the student or instructor a tag belongs to.

    Note: Read-only to the attendance core; owned by the persistence layer.
    """

    role: Role
    identity_id: int
    display_name: str
    is_active: bool = True

    @property
    def key(self) -> tuple[str, int]:
        return (self.role.value, self.identity_id)
