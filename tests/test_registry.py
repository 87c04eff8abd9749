# tests/test_registry.py

import pytest

from soulreg_core.errors import (
    EmptyUrl, IdentityNotUnique, InvalidAddress, InvalidContractInteraction,
    MaxRetriesExceeded, NotPermitted, RegistryPaused, SoulAlreadyExists,
    SoulDoesNotExist, TokenAmountIsZero, Unauthorized, UnauthorizedBurning,
)
from soulreg_core.registry import SoulRegistry
from soulreg_core.storage import InMemoryStorage
from soulreg_core.transport import TransportTransientError

ADMIN = "0xad00000000000000000000000000000000000001"
BASE_ASSET = "0xba5e000000000000000000000000000000000001"
ALICE = "0xa11ce00000000000000000000000000000000001"
BOB = "0xb0b0000000000000000000000000000000000001"
CAROL = "0xca201000000000000000000000000000000000001"
NULL = "0x" + "0" * 40


def test_mint_and_lookup(registry, clock):
    soul = registry.mint(ADMIN, ALICE, "alice", "https://x")

    got = registry.get_soul(ALICE, False).soul
    assert got.identity == b"alice"
    assert got.url == b"https://x"
    assert got.minted_at == got.last_update == clock.now
    assert len(got.uuid) == 16
    assert got.uuid == soul.uuid
    assert registry.get_counter() == 1


def test_second_mint_for_same_owner_rejected(registry):
    registry.mint(ADMIN, ALICE, "alice", "https://x")
    with pytest.raises(SoulAlreadyExists):
        registry.mint(ADMIN, ALICE, "alice2", "https://y")


def test_identity_must_be_unique(registry):
    registry.mint(ADMIN, ALICE, "alice", "https://x")
    with pytest.raises(IdentityNotUnique):
        registry.mint(ADMIN, BOB, "alice", "https://z")


def test_validation_order_identity_before_url_before_owner(registry):
    registry.mint(ADMIN, ALICE, "alice", "https://x")
    # taken identity wins over the empty url and the existing soul
    with pytest.raises(IdentityNotUnique):
        registry.mint(ADMIN, ALICE, "alice", "")
    # empty url wins over the existing soul
    with pytest.raises(EmptyUrl):
        registry.mint(ADMIN, ALICE, "fresh", "")


def test_mint_rejects_null_owner(registry):
    with pytest.raises(InvalidAddress):
        registry.mint(ADMIN, NULL, "alice", "https://x")
    with pytest.raises(InvalidAddress):
        registry.mint(ADMIN, "", "alice", "https://x")


def test_mint_requires_administrator(registry):
    with pytest.raises(Unauthorized):
        registry.mint(ALICE, ALICE, "alice", "https://x")


def test_mint_rejected_while_paused(registry, pause):
    pause.pause(ADMIN)
    with pytest.raises(RegistryPaused):
        registry.mint(ADMIN, ALICE, "alice", "https://x")
    pause.unpause(ADMIN)
    registry.mint(ADMIN, ALICE, "alice", "https://x")


@pytest.mark.parametrize("args,error", [
    ((ADMIN, BOB, "alice", "https://z"), IdentityNotUnique),
    ((ADMIN, BOB, "bob", ""), EmptyUrl),
    ((ADMIN, ALICE, "alice2", "https://y"), SoulAlreadyExists),
    ((BOB, BOB, "bob", "https://b"), Unauthorized),
    ((ADMIN, NULL, "bob", "https://b"), InvalidAddress),
])
def test_failed_mints_leave_state_untouched(registry, storage, args, error):
    registry.mint(ADMIN, ALICE, "alice", "https://x")
    before = storage.snapshot()

    with pytest.raises(error):
        registry.mint(*args)

    assert storage.snapshot() == before
    assert registry.get_counter() == 1


def test_paused_mint_leaves_state_untouched(registry, storage, pause):
    registry.mint(ADMIN, ALICE, "alice", "https://x")
    pause.pause(ADMIN)
    before = storage.snapshot()

    with pytest.raises(RegistryPaused):
        registry.mint(ADMIN, BOB, "bob", "https://b")

    assert storage.snapshot() == before


def test_exhausted_retries_abort_mint_without_partial_state(registry, storage, clock):
    counter = registry.get_counter()
    colliding = registry.generator.candidate(clock.now, ALICE, counter)
    registry.index.reserve_uuid(colliding)
    before = storage.snapshot()

    with pytest.raises(MaxRetriesExceeded) as exc:
        registry.mint(ADMIN, ALICE, "alice", "https://x")

    assert exc.value.attempts == 3
    assert storage.snapshot() == before
    assert not registry.has_soul(ALICE)
    # the identity was not consumed by the failed mint
    registry.index.release_uuid(colliding)
    registry.mint(ADMIN, ALICE, "alice", "https://x")


def test_corrected_mode_resolves_collision(storage, auth, pause, clock):
    reg = SoulRegistry(storage, auth, pause, BASE_ASSET, clock=clock, uuid_mode="corrected")
    colliding = reg.generator.candidate(clock.now, ALICE, 0)
    reg.index.reserve_uuid(colliding)

    soul = reg.mint(ADMIN, ALICE, "alice", "https://x")

    assert soul.uuid != colliding
    assert soul.uuid == reg.generator.candidate(clock.now, ALICE, 0, attempt=1)


def test_live_souls_have_distinct_identities_and_uuids(registry, clock):
    owners = [f"0x{i:040x}" for i in range(1, 21)]
    souls = [registry.mint(ADMIN, o, f"id-{i}", "https://x") for i, o in enumerate(owners)]

    assert len({s.uuid for s in souls}) == len(souls)
    assert len({s.identity for s in souls}) == len(souls)
    assert registry.get_counter() == 20


def test_burn_then_lookup_and_identity_stays_reserved(registry):
    soul = registry.mint(ADMIN, ALICE, "alice", "https://x")
    registry.burn(ADMIN, ALICE)

    with pytest.raises(SoulDoesNotExist):
        registry.get_soul(ALICE, False)
    assert not registry.index.uuid_taken(soul.uuid)
    assert registry.index.identity_taken(b"alice")

    with pytest.raises(IdentityNotUnique):
        registry.mint(ADMIN, ALICE, "alice", "https://z")

    # the owner itself can be minted again under a new identity
    again = registry.mint(ADMIN, ALICE, "alice-2", "https://z")
    assert again.uuid != soul.uuid


def test_burn_by_owner_allowed(registry):
    registry.mint(ADMIN, ALICE, "alice", "https://x")
    registry.burn(ALICE, ALICE)
    assert not registry.has_soul(ALICE)


def test_burn_by_stranger_rejected(registry):
    registry.mint(ADMIN, ALICE, "alice", "https://x")
    with pytest.raises(UnauthorizedBurning):
        registry.burn(BOB, ALICE)
    assert registry.has_soul(ALICE)


def test_burn_missing_soul_rejected(registry, storage):
    before = storage.snapshot()
    with pytest.raises(SoulDoesNotExist):
        registry.burn(ADMIN, ALICE)
    assert storage.snapshot() == before


def test_burn_rejected_while_paused(registry, pause):
    registry.mint(ADMIN, ALICE, "alice", "https://x")
    pause.pause(ADMIN)
    with pytest.raises(RegistryPaused):
        registry.burn(ALICE, ALICE)


def test_lookup_with_metadata(registry):
    registry.mint(ADMIN, ALICE, "alice", "https://x")
    registry.allow_metadata_key(ADMIN, "twitter")
    registry.set_metadata(ADMIN, ALICE, "twitter", "@alice")

    bare = registry.lookup(ALICE)
    assert bare.keys == [] and bare.values == []

    full = registry.lookup(ALICE, include_metadata=True)
    assert full.keys == ["twitter"]
    assert full.values == [b"@alice"]
    assert full.metadata() == {"twitter": b"@alice"}


def test_events_emitted_and_audited(registry, bus, storage):
    received = []
    bus.subscribe("soulreg.mint", received.append)
    bus.subscribe("soulreg.burn", received.append)

    registry.mint(ADMIN, ALICE, "alice", "https://x")
    registry.burn(ADMIN, ALICE)

    assert [e["name"] for e in received] == ["Mint", "Burn"]
    assert received[0]["payload"] == {"owner": ALICE}
    assert [e["event_type"] for e in storage.list_events()] == ["Mint", "Burn"]


def test_metadata_writes_emit_no_update_event(registry, bus, clock):
    registry.mint(ADMIN, ALICE, "alice", "https://x")
    registry.allow_metadata_key(ADMIN, "k")
    clock.advance(60)
    registry.set_metadata(ADMIN, ALICE, "k", "v")

    assert all(topic != "soulreg.update" for topic, _ in bus.published)
    soul = registry.lookup(ALICE).soul
    assert soul.last_update == soul.minted_at


class FailingTransport:
    def publish(self, topic, payload, headers=None, key=None):
        raise TransportTransientError("indexer down")


def test_notify_failure_does_not_undo_mint(storage, auth, pause, clock, caplog):
    reg = SoulRegistry(storage, auth, pause, BASE_ASSET, notifier=FailingTransport(), clock=clock)
    reg.mint(ADMIN, ALICE, "alice", "https://x")

    assert reg.has_soul(ALICE)
    assert "failed to publish Mint" in caplog.text


def test_withdraw(registry, treasury, bus):
    received = []
    bus.subscribe("soulreg.withdrawal", received.append)

    registry.withdraw(ADMIN, BASE_ASSET, CAROL, 250)

    assert treasury.balances[BASE_ASSET] == 750
    assert treasury.transfers == [(BASE_ASSET, CAROL, 250)]
    assert received[0]["payload"] == {"initiator": ADMIN, "destination": CAROL, "amount": 250}


def test_withdraw_rejections(registry, treasury):
    with pytest.raises(Unauthorized):
        registry.withdraw(ALICE, BASE_ASSET, CAROL, 1)
    with pytest.raises(TokenAmountIsZero):
        registry.withdraw(ADMIN, BASE_ASSET, CAROL, 0)
    with pytest.raises(InvalidAddress):
        registry.withdraw(ADMIN, BASE_ASSET, NULL, 1)
    with pytest.raises(InvalidContractInteraction):
        registry.withdraw(ADMIN, "0xnotanasset", CAROL, 1)
    assert treasury.transfers == []


def test_failed_transfer_leaves_no_withdrawal_record(registry, storage):
    before = storage.snapshot()

    # more than the treasury holds
    with pytest.raises(InvalidContractInteraction):
        registry.withdraw(ADMIN, BASE_ASSET, CAROL, 5000)

    assert storage.snapshot() == before


class AuditFailingStorage(InMemoryStorage):
    def log_event(self, event_type, payload):
        raise RuntimeError("audit unavailable")


def test_failed_audit_write_stops_withdrawal(auth, pause, treasury):
    reg = SoulRegistry(AuditFailingStorage(), auth, pause, BASE_ASSET, treasury=treasury)

    with pytest.raises(RuntimeError):
        reg.withdraw(ADMIN, BASE_ASSET, CAROL, 10)

    assert treasury.balances[BASE_ASSET] == 1000
    assert treasury.transfers == []


def test_direct_transfers_refused(registry):
    with pytest.raises(NotPermitted):
        registry.receive(ALICE, 10)


def test_read_surface(registry):
    assert registry.get_base_asset_handle() == BASE_ASSET
    assert len(registry.registry_fingerprint) == 32
    assert registry.get_counter() == 0


def test_constructor_validates_base_asset(storage, auth, pause, treasury):
    with pytest.raises(InvalidAddress):
        SoulRegistry(storage, auth, pause, NULL)
    with pytest.raises(InvalidContractInteraction):
        SoulRegistry(storage, auth, pause, "0xunknown", treasury=treasury)
