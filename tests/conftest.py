import pytest

from soulreg_core.access import PauseSwitch, SingleAdministrator
from soulreg_core.registry import SoulRegistry
from soulreg_core.storage import InMemoryStorage, SQLiteStorage
from soulreg_core.transport import LocalAdapter
from soulreg_core.treasury import InMemoryTreasury

ADMIN = "0xad00000000000000000000000000000000000001"
BASE_ASSET = "0xba5e000000000000000000000000000000000001"
NOW = 1_700_000_000


class FakeClock:
    def __init__(self, now=NOW):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds=1):
        self.now += seconds


@pytest.fixture(params=["memory", "sqlite"])
def storage(request, tmp_path):
    if request.param == "memory":
        s = InMemoryStorage()
    else:
        s = SQLiteStorage(str(tmp_path / "soulreg_state.db"))
    yield s
    s.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def auth():
    return SingleAdministrator(ADMIN)


@pytest.fixture
def pause(auth):
    return PauseSwitch(auth)


@pytest.fixture
def treasury():
    t = InMemoryTreasury()
    t.register_asset(BASE_ASSET, balance=1000)
    return t


@pytest.fixture
def bus():
    return LocalAdapter()


@pytest.fixture
def registry(storage, auth, pause, treasury, bus, clock):
    return SoulRegistry(
        storage=storage,
        auth=auth,
        pause=pause,
        base_asset=BASE_ASSET,
        chain_id=1,
        treasury=treasury,
        notifier=bus,
        clock=clock,
    )
