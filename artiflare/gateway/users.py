"""
Users — keyed by the auth provider's UID.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from kungfu import Error, Ok, Result

from artiflare.errors import NotFound, TransactionAborted, ValidationError
from artiflare.gateway._base import Collection
from artiflare.schemas import Address, Preferences, Role, User
from artiflare.store import SERVER_TIMESTAMP

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AuthIdentity:
    """What the auth provider knows about a signed-in account."""

    uid: str
    email: str | None = None
    display_name: str | None = None
    phone_number: str | None = None
    photo_url: str | None = None

    def fallback_display_name(self) -> str:
        if self.display_name:
            return self.display_name
        if self.phone_number:
            return f"User {self.phone_number[-4:]}"
        return "User"


class UserGateway(Collection[User]):
    name = "users"
    schema = User
    id_field = "uid"

    async def get_or_create(
        self, identity: AuthIdentity
    ) -> Result[User, ValidationError | TransactionAborted]:
        """
        Resolve the profile for a fresh sign-in.

        Looks up by UID, then by phone number; creates a minimal customer
        profile when neither matches.
        """
        got = await self.get(identity.uid)
        if got.entity is not None:
            return Ok(got.entity)

        if identity.phone_number:
            existing = await self.find_one("phoneNumber", identity.phone_number)
            if existing is not None:
                logger.info(
                    "Matched user %s by phone number for uid %s", existing.uid, identity.uid
                )
                return Ok(existing)

        logger.info("Creating profile for uid %s", identity.uid)
        return await self.create(
            User(
                uid=identity.uid,
                display_name=identity.fallback_display_name(),
                email=identity.email or "",
                role=Role.CUSTOMER,
                photo_url=identity.photo_url,
                phone_number=identity.phone_number,
                preferences=Preferences(),
            )
        )

    async def touch_login(self, uid: str) -> Result[User, ValidationError | NotFound | TransactionAborted]:
        return await self.update(uid, {"lastLogin": SERVER_TIMESTAMP})

    async def save_addresses(
        self, uid: str, addresses: Sequence[Address]
    ) -> Result[User, ValidationError | NotFound | TransactionAborted]:
        """Write the whole address list back; return the updated user."""
        return await self.update(uid, {"addresses": list(addresses)})


__all__ = ("AuthIdentity", "UserGateway")
