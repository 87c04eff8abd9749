# soulreg_core/config.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
import os

from soulreg_core.access import AuthorizationProvider, PauseState
from soulreg_core.constants import DEFAULT_CHAIN_ID, UUID_MODE_FAITHFUL, UUID_MODES
from soulreg_core.registry import SoulRegistry
from soulreg_core.storage import load_storage_provider
from soulreg_core.transport import transport_factory
from soulreg_core.treasury import ValueTransfer


@dataclass
class RegistryConfig:
    storage_provider: str = "memory"
    sqlite_path: str = "db/soulreg_state.db"
    chain_id: int = DEFAULT_CHAIN_ID
    uuid_mode: str = UUID_MODE_FAITHFUL
    transport: Optional[str] = None   # None → no event publication

    @classmethod
    def from_env(cls, overrides: dict | None = None) -> "RegistryConfig":
        """Read SOULREG_* variables; `overrides` wins over the environment."""
        overrides = overrides or {}

        def pick(key, env, default=None):
            # an override is taken as given, even when falsy
            if key in overrides:
                return overrides[key]
            return os.getenv(env, default)

        cfg = cls(
            storage_provider=pick("storage_provider", "SOULREG_STORAGE_PROVIDER", "memory"),
            sqlite_path=pick("sqlite_path", "SOULREG_DB_PATH", "db/soulreg_state.db"),
            chain_id=int(pick("chain_id", "SOULREG_CHAIN_ID", DEFAULT_CHAIN_ID)),
            uuid_mode=pick("uuid_mode", "SOULREG_UUID_MODE", UUID_MODE_FAITHFUL).lower(),
            transport=pick("transport", "SOULREG_TRANSPORT"),
        )
        if cfg.uuid_mode not in UUID_MODES:
            raise ValueError(f"Unknown uuid mode: {cfg.uuid_mode}")
        return cfg


def build_registry(
    config: RegistryConfig,
    auth: AuthorizationProvider,
    pause: PauseState,
    base_asset: str,
    treasury: Optional[ValueTransfer] = None,
) -> SoulRegistry:
    storage = load_storage_provider({
        "provider": config.storage_provider,
        "sqlite_path": config.sqlite_path,
    })
    notifier = transport_factory(config.transport) if config.transport else None
    return SoulRegistry(
        storage=storage,
        auth=auth,
        pause=pause,
        base_asset=base_asset,
        chain_id=config.chain_id,
        treasury=treasury,
        notifier=notifier,
        uuid_mode=config.uuid_mode,
    )
