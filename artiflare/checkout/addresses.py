"""
Address book — edits a user's address list as a whole.

Every operation reads the user, rewrites the full list, writes it back and
returns the updated user (read-your-writes without a second fetch).

Rules enforced at write time:
- at most one address is default; the first address ever added becomes it;
- marking an address default clears the flag everywhere else;
- deleting the default promotes the first remaining address;
- the last remaining address cannot be deleted.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from typing import Any

from kungfu import Error, Ok, Result

from artiflare.errors import (
    CheckoutRejected,
    NotFound,
    TransactionAborted,
    ValidationError,
)
from artiflare.gateway import UserGateway
from artiflare.schemas import Address, User, validate

logger = logging.getLogger(__name__)

type AddressError = ValidationError | NotFound | CheckoutRejected | TransactionAborted


def normalize_defaults(addresses: list[Address], preferred: str | None = None) -> list[Address]:
    """
    Return a copy with exactly one default (when non-empty).

    ``preferred`` wins; otherwise the first address already flagged; otherwise
    the first address.
    """
    if not addresses:
        return []
    ids = [a.id for a in addresses]
    if preferred not in ids:
        preferred = next((a.id for a in addresses if a.is_default), ids[0])
    return [a.model_copy(update={"is_default": a.id == preferred}) for a in addresses]


class AddressBook:
    def __init__(self, users: UserGateway) -> None:
        self.users = users

    async def _load(self, uid: str) -> Result[User, NotFound]:
        got = await self.users.get(uid)
        if got.entity is None:
            return Error(NotFound(self.users.name, uid))
        return Ok(got.entity)

    async def _save(
        self, uid: str, addresses: list[Address]
    ) -> Result[User, AddressError]:
        return await self.users.save_addresses(uid, addresses)

    async def add(
        self,
        uid: str,
        fields: Mapping[str, Any],
        make_default: bool = False,
    ) -> Result[User, AddressError]:
        """Append a new address (fresh UUID); returns the updated user."""
        match await self._load(uid):
            case Error(err):
                return Error(err)
            case Ok(user):
                pass

        candidate = {**fields, "id": str(uuid.uuid4()), "isDefault": False}
        candidate.pop("is_default", None)
        match validate(Address, candidate):
            case Error(err):
                return Error(err)
            case Ok(address):
                pass

        current = list(user.addresses or [])
        preferred = address.id if make_default or not current else None
        updated = normalize_defaults([*current, address], preferred)
        logger.debug("User %s: adding address %s", uid, address.id)
        return await self._save(uid, updated)

    async def edit(
        self,
        uid: str,
        address_id: str,
        changes: Mapping[str, Any],
    ) -> Result[User, AddressError]:
        """Merge ``changes`` into one address. Use ``set_default`` to move the default."""
        match await self._load(uid):
            case Error(err):
                return Error(err)
            case Ok(user):
                pass

        current = list(user.addresses or [])
        index = next((i for i, a in enumerate(current) if a.id == address_id), None)
        if index is None:
            return Error(NotFound("addresses", address_id))

        merged = {
            **current[index].model_dump(by_alias=True),
            **{k: v for k, v in changes.items() if k not in ("id", "isDefault", "is_default")},
        }
        match validate(Address, merged):
            case Error(err):
                return Error(err)
            case Ok(address):
                current[index] = address

        return await self._save(uid, normalize_defaults(current))

    async def set_default(self, uid: str, address_id: str) -> Result[User, AddressError]:
        match await self._load(uid):
            case Error(err):
                return Error(err)
            case Ok(user):
                pass

        current = list(user.addresses or [])
        if not any(a.id == address_id for a in current):
            return Error(NotFound("addresses", address_id))
        return await self._save(uid, normalize_defaults(current, address_id))

    async def remove(self, uid: str, address_id: str) -> Result[User, AddressError]:
        """Delete one address; rejected when it is the only one left."""
        match await self._load(uid):
            case Error(err):
                return Error(err)
            case Ok(user):
                pass

        current = list(user.addresses or [])
        if not any(a.id == address_id for a in current):
            return Error(NotFound("addresses", address_id))
        if len(current) == 1:
            return Error(CheckoutRejected("You must keep at least one address."))

        remaining = [a for a in current if a.id != address_id]
        logger.debug("User %s: removing address %s", uid, address_id)
        return await self._save(uid, normalize_defaults(remaining))


__all__ = ("AddressBook", "AddressError", "normalize_defaults")
