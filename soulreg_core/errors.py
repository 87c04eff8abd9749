"""
soulreg_core.errors
-------------------
Typed rejections raised by the registry core.

Every failure is synchronous and aborts the whole operation before any
state is written.
"""

from __future__ import annotations
from typing import Optional


class RegistryError(Exception):
    pass


# --- precondition violations (caller-correctable) ---

class PreconditionError(RegistryError):
    pass


class InvalidAddress(PreconditionError):
    pass


class InvalidContractInteraction(PreconditionError):
    pass


class TokenAmountIsZero(PreconditionError):
    pass


class MetadataKeyNotAllowed(PreconditionError):
    def __init__(self, key: str):
        self.key = key
        super().__init__(f"metadata key not allowed: {key!r}")


class InvalidMetadataKey(PreconditionError):
    pass


class EmptyUrl(PreconditionError):
    pass


# --- uniqueness violations ---

class UniquenessError(RegistryError):
    pass


class IdentityNotUnique(UniquenessError):
    pass


class SoulAlreadyExists(UniquenessError):
    def __init__(self, owner: str):
        self.owner = owner
        super().__init__(f"soul already exists for {owner}")


# --- absence ---

class SoulDoesNotExist(RegistryError):
    def __init__(self, owner: Optional[str] = None):
        self.owner = owner
        super().__init__(f"no soul for {owner}" if owner else "soul does not exist")


# --- authorization ---

class AuthorizationError(RegistryError):
    pass


class Unauthorized(AuthorizationError):
    pass


class UnauthorizedBurning(AuthorizationError):
    pass


class NotPermitted(AuthorizationError):
    pass


class RegistryPaused(AuthorizationError):
    pass


# --- resource exhaustion ---

class MaxRetriesExceeded(RegistryError):
    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(f"identifier generation collided on all {attempts} attempts")
