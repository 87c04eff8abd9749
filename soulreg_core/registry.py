"""
soulreg_core.registry
---------------------
SoulRegistry orchestrates the registry invariant engine:

- mint: validate uniqueness, generate an identifier, commit the record,
  both uniqueness-set entries and the counter bump as one transaction
- burn: remove the record and release its identifier
- lookup: read a record, optionally joined with its metadata enumeration

Every rejection is raised before the first write, so a failed call leaves
storage exactly as it was. Authorization and pause checks are delegated to
the injected collaborators.

Burning does not release the identity fingerprint: a burned identity string
stays reserved and cannot be minted again.
"""

from __future__ import annotations
from typing import Callable, List, Optional, Tuple

from soulreg_core.access import AuthorizationProvider, PauseState
from soulreg_core.constants import DEFAULT_CHAIN_ID, UUID_MODE_FAITHFUL
from soulreg_core.crypto import compute_fingerprint, registry_fingerprint
from soulreg_core.errors import (
    EmptyUrl, IdentityNotUnique, InvalidAddress, InvalidContractInteraction,
    NotPermitted, RegistryError, RegistryPaused, SoulAlreadyExists, SoulDoesNotExist,
    TokenAmountIsZero, Unauthorized, UnauthorizedBurning,
)
from soulreg_core.events import RegistryEvent, burn_event, mint_event, withdrawal_event
from soulreg_core.identifier import IdentifierGenerator
from soulreg_core.logger import get_logger
from soulreg_core.metadata import AllowedKeySet, MetadataStore
from soulreg_core.storage.models import Soul, SoulView
from soulreg_core.storage.provider import StorageProvider
from soulreg_core.transport.transport_base import BaseTransport, TransportError
from soulreg_core.treasury import ValueTransfer
from soulreg_core.uniqueness import UniquenessIndex
from soulreg_core.utils import is_null_address, now_seconds, to_bytes

log = get_logger("SoulReg.Registry")

SOUL_COUNTER = "souls"


class SoulRegistry:
    def __init__(
        self,
        storage: StorageProvider,
        auth: AuthorizationProvider,
        pause: PauseState,
        base_asset: str,
        chain_id: int = DEFAULT_CHAIN_ID,
        treasury: Optional[ValueTransfer] = None,
        notifier: Optional[BaseTransport] = None,
        clock: Callable[[], int] = now_seconds,
        uuid_mode: str = UUID_MODE_FAITHFUL,
    ):
        if is_null_address(base_asset):
            raise InvalidAddress("base asset handle must be non-null")
        if treasury is not None and not treasury.is_live_asset(base_asset):
            raise InvalidContractInteraction(f"{base_asset} is not a live asset")

        self.storage = storage
        self.auth = auth
        self.pause = pause
        self.base_asset = base_asset
        self.chain_id = chain_id
        self.treasury = treasury
        self.notifier = notifier
        self.clock = clock

        self._fingerprint = registry_fingerprint(base_asset)
        self.index = UniquenessIndex(storage)
        self.allowed_keys = AllowedKeySet(storage)
        self.metadata = MetadataStore(storage, self.allowed_keys)
        self.generator = IdentifierGenerator(
            self._fingerprint, chain_id, self.index.uuid_taken, mode=uuid_mode,
        )

    # ------------------------------------------------------------------
    # Souls
    # ------------------------------------------------------------------
    def mint(self, caller: str, owner: str, identity, url) -> Soul:
        self._require_admin(caller)
        self._require_not_paused()
        if is_null_address(owner):
            raise self._reject(InvalidAddress("owner must be a non-null key"))

        identity = to_bytes(identity)
        url = to_bytes(url)
        if self.index.identity_taken(identity):
            raise self._reject(IdentityNotUnique("identity already registered"))
        if not url:
            raise self._reject(EmptyUrl("url must be non-empty"))
        if self.storage.get_soul(owner) is not None:
            raise self._reject(SoulAlreadyExists(owner))

        now = self.clock()
        counter = self.storage.get_counter(SOUL_COUNTER)
        uuid = self.generator.generate(owner, now, counter)

        soul = Soul(owner=owner, identity=identity, url=url,
                    minted_at=now, last_update=now, uuid=uuid)
        event = mint_event(owner)
        with self.storage.transaction():
            self.storage.put_soul(soul)
            self.index.reserve_identity(identity)
            self.index.reserve_uuid(uuid)
            self.storage.set_counter(SOUL_COUNTER, counter + 1)
            self._record(event)

        log.info(f"[MINT] owner={owner} uuid={soul.uuid_hex} "
                 f"identity_fpr={compute_fingerprint(identity)} counter={counter + 1}")
        self._publish(event, key=owner)
        return soul

    def burn(self, caller: str, owner: str) -> None:
        if caller != owner and not self.auth.is_administrator(caller):
            raise self._reject(UnauthorizedBurning(f"{caller} may not burn soul of {owner}"))
        self._require_not_paused()

        soul = self.storage.get_soul(owner)
        if soul is None:
            raise self._reject(SoulDoesNotExist(owner))

        event = burn_event(owner)
        with self.storage.transaction():
            self.storage.delete_soul(owner)
            self.index.release_uuid(soul.uuid)
            self._record(event)

        log.info(f"[BURN] owner={owner} uuid={soul.uuid_hex} by={caller}")
        self._publish(event, key=owner)

    def lookup(self, owner: str, include_metadata: bool = False) -> SoulView:
        soul = self.storage.get_soul(owner)
        if soul is None:
            raise SoulDoesNotExist(owner)
        if not include_metadata:
            return SoulView(soul)
        keys, values = self.metadata.enumerate(owner)
        return SoulView(soul, keys, values)

    get_soul = lookup

    def has_soul(self, owner: str) -> bool:
        return self.storage.get_soul(owner) is not None

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------
    def allow_metadata_key(self, caller: str, key: str) -> None:
        self._require_admin(caller)
        self._require_not_paused()
        self.allowed_keys.allow(key)
        log.info(f"[META] key allowed: {key}")

    def disallow_metadata_key(self, caller: str, key: str) -> None:
        self._require_admin(caller)
        self._require_not_paused()
        self.allowed_keys.disallow(key)
        log.info(f"[META] key disallowed: {key}")

    def set_metadata(self, caller: str, owner: str, key: str, value) -> None:
        self._require_admin(caller)
        self._require_not_paused()
        if is_null_address(owner):
            raise self._reject(InvalidAddress("owner must be a non-null key"))
        with self.storage.transaction():
            self.metadata.set(owner, key, to_bytes(value))

    def delete_metadata(self, caller: str, owner: str, key: str) -> None:
        self._require_admin(caller)
        self._require_not_paused()
        if is_null_address(owner):
            raise self._reject(InvalidAddress("owner must be a non-null key"))
        self.metadata.delete(owner, key)

    def is_metadata_key_allowed(self, key: str) -> bool:
        return self.allowed_keys.is_allowed(key)

    def allowed_metadata_keys(self) -> List[str]:
        return self.allowed_keys.keys()

    def get_metadata_value(self, owner: str, key: str) -> bytes:
        return self.metadata.get(owner, key)

    def enumerate_metadata(self, owner: str) -> Tuple[List[str], List[bytes]]:
        return self.metadata.enumerate(owner)

    # ------------------------------------------------------------------
    # Value path
    # ------------------------------------------------------------------
    def withdraw(self, caller: str, token_handle: str, destination: str, amount: int) -> None:
        """Rescue assets held by the registry; delegated to the treasury collaborator."""
        self._require_admin(caller)
        if amount <= 0:
            raise self._reject(TokenAmountIsZero("amount must be positive"))
        if is_null_address(destination):
            raise self._reject(InvalidAddress("destination must be non-null"))
        if self.treasury is None or not self.treasury.is_live_asset(token_handle):
            raise self._reject(InvalidContractInteraction(f"{token_handle} is not a live asset"))

        event = withdrawal_event(caller, destination, amount)
        # audit first: a failed audit write stops the transfer, a failed
        # transfer rolls the audit record back
        with self.storage.transaction():
            self._record(event)
            self.treasury.transfer(token_handle, destination, amount)
        log.info(f"[WITHDRAW] {amount} of {token_handle} -> {destination} by={caller}")
        self._publish(event, key=caller)

    def receive(self, sender: str, amount: int) -> None:
        raise self._reject(NotPermitted(f"direct transfers to the registry are refused ({sender})"))

    # ------------------------------------------------------------------
    # Read surface
    # ------------------------------------------------------------------
    def get_base_asset_handle(self) -> str:
        return self.base_asset

    def get_counter(self) -> int:
        return self.storage.get_counter(SOUL_COUNTER)

    @property
    def registry_fingerprint(self) -> bytes:
        return self._fingerprint

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _require_admin(self, caller: str) -> None:
        if not self.auth.is_administrator(caller):
            raise self._reject(Unauthorized(f"{caller} is not the administrator"))

    def _require_not_paused(self) -> None:
        if self.pause.is_paused():
            raise self._reject(RegistryPaused("registry is paused"))

    @staticmethod
    def _reject(exc: RegistryError) -> RegistryError:
        log.warning(f"[REJECT] {type(exc).__name__}: {exc}")
        return exc

    def _record(self, event: RegistryEvent) -> None:
        self.storage.log_event(event.name, event.to_dict())

    def _publish(self, event: RegistryEvent, key: Optional[str] = None) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.publish(event.topic, event.to_dict(), key=key)
        except TransportError:
            # the registry change is already committed
            log.exception(f"[NOTIFY] failed to publish {event.name} event_id={event.event_id}")
