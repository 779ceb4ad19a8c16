"""
Conversion between the domain `User` and the storage `UserRecord`.

Functions here are pure: no session, no I/O. `None` maps to `None` in both
directions.
"""
from typing import Any

from userstore.domain.user import User, UserPatch
from userstore.models.user import UserRecord

# Filled in by storage; left unset on the record when the domain value has none
GENERATED_FIELDS = ("id", "created_at", "updated_at")

# Fields that update(user) treats as "not supplied" when empty
_PATCHABLE_TEXT_FIELDS = ("name", "email", "password_hash", "role")


def to_domain(record: UserRecord | None) -> User | None:
    if record is None:
        return None
    return User(
        id=record.id,
        name=record.name,
        email=record.email,
        password_hash=record.password_hash,
        is_active=record.is_active,
        role=record.role,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def to_record(user: User | None) -> UserRecord | None:
    """
    Build a transient `UserRecord` from a domain user.

    Generated fields are only copied when the caller set them, so the column
    defaults (uuid4, now()) apply on insert otherwise.
    """
    if user is None:
        return None

    values: dict[str, Any] = {
        "name": user.name,
        "email": user.email,
        "password_hash": user.password_hash,
        "is_active": user.is_active,
        "role": user.role,
    }
    for field in GENERATED_FIELDS:
        value = getattr(user, field)
        if value is not None:
            values[field] = value

    return UserRecord(**values)


def patch_from_user(user: User) -> UserPatch:
    """
    Derive the partial update that `update(user)` writes.

    Empty text fields count as "not supplied". Booleans have no "not
    supplied" value on `User`, so `is_active` is always written, `False`
    included; use `UserPatch` directly to leave it untouched.
    """
    supplied = {field: getattr(user, field) for field in _PATCHABLE_TEXT_FIELDS if getattr(user, field)}
    return UserPatch(is_active=user.is_active, **supplied)
