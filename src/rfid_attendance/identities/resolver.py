from __future__ import annotations

from ..common.validators import normalize_tag
from ..core.exceptions import InactiveIdentityError, UnknownTagError
from .model import Identity
from .repository import IdentityRepository


class TagResolver:
    """Maps a raw tag to the identity it is registered to. Pure lookup, no writes."""

    def __init__(self, identities: IdentityRepository):
        self._identities = identities

    def resolve(self, tag: str) -> Identity:
        normalized = normalize_tag(tag)
        identity = self._identities.find_identity_by_tag(normalized)
        if identity is None:
            raise UnknownTagError(normalized)
        if not identity.is_active:
            raise InactiveIdentityError(f"{identity.role.value.title()} {identity.identity_id} is not active")
        return identity
