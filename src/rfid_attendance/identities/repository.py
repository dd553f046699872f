from __future__ import annotations

from typing import Optional, Protocol

from ..core.enums import Role
from .model import Identity


class IdentityRepository(Protocol):
    """Repository interface for tag registrations and identities.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def find_identity_by_tag(self, tag: str) -> Optional[Identity]:
        raise NotImplementedError

    def get_identity(self, role: Role, identity_id: int) -> Optional[Identity]:
        raise NotImplementedError
