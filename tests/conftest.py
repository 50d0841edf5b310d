import pytest

from fakes import FakeBackend, batch_text
from rasoi_revive.config import Settings
from rasoi_revive.services.kitchen import KitchenSession
from rasoi_revive.services.llm import RecipeGenerator


@pytest.fixture
def settings(tmp_path, monkeypatch):
    monkeypatch.setenv("DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("GEMINI_API_KEY", "test")
    return Settings()


@pytest.fixture
def backend():
    return FakeBackend(payload=batch_text("r1", "r2", "r3"))


@pytest.fixture
def generator(backend, settings):
    return RecipeGenerator(backend, settings)


@pytest.fixture
def kitchen(generator, settings):
    return KitchenSession(generator, settings)
