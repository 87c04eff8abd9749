# soulreg_core/access.py
"""
Authorization and pause collaborators injected into the registry.

The registry only reads these (`is_administrator`, `is_paused`); the
mutators here are the administrative toggles that sit outside the core.
"""

from __future__ import annotations

from soulreg_core.errors import InvalidAddress, Unauthorized
from soulreg_core.logger import get_logger
from soulreg_core.utils import is_null_address

log = get_logger("SoulReg.Access")


class AuthorizationProvider:
    # Interface
    def is_administrator(self, caller: str) -> bool: ...
    def transfer_administration(self, caller: str, new_owner: str) -> None: ...


class PauseState:
    # Interface
    def is_paused(self) -> bool: ...
    def pause(self, caller: str) -> None: ...
    def unpause(self, caller: str) -> None: ...


class SingleAdministrator(AuthorizationProvider):
    def __init__(self, administrator: str):
        if is_null_address(administrator):
            raise InvalidAddress("administrator must be a non-null key")
        self.administrator = administrator

    def is_administrator(self, caller: str) -> bool:
        return caller == self.administrator

    def transfer_administration(self, caller: str, new_owner: str) -> None:
        if not self.is_administrator(caller):
            raise Unauthorized(f"{caller} is not the administrator")
        if is_null_address(new_owner):
            raise InvalidAddress("new administrator must be a non-null key")
        log.info(f"[ADMIN] transferred {self.administrator} -> {new_owner}")
        self.administrator = new_owner


class PauseSwitch(PauseState):
    def __init__(self, auth: AuthorizationProvider, paused: bool = False):
        self.auth = auth
        self._paused = paused

    def is_paused(self) -> bool:
        return self._paused

    def pause(self, caller: str) -> None:
        self._require_admin(caller)
        self._paused = True
        log.info(f"[PAUSE] paused by {caller}")

    def unpause(self, caller: str) -> None:
        self._require_admin(caller)
        self._paused = False
        log.info(f"[PAUSE] unpaused by {caller}")

    def _require_admin(self, caller: str) -> None:
        if not self.auth.is_administrator(caller):
            raise Unauthorized(f"{caller} is not the administrator")
