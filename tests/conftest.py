import pytest

from desuu_prime.application.services.interrupt_manager import InterruptManager
from desuu_prime.application.services.playback_controller import PlaybackController
from desuu_prime.domain.music.entities import GuildSession

from fakes import GUILD_ID, FakeBackend, FakeResolver, make_item

# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def resolver():
    return FakeResolver()


@pytest.fixture
def session(backend):
    return GuildSession(guild_id=GUILD_ID, backend=backend)


@pytest.fixture
def controller(session, resolver):
    return PlaybackController(session, resolver)


@pytest.fixture
def interrupts(controller, resolver):
    return InterruptManager(controller, resolver)


@pytest.fixture
def item_factory():
    return make_item
