"""Shared fixtures for all tests."""

from collections.abc import Callable

import pytest
import structlog

from anyventure.config import get_settings
from anyventure.game.character.character import Character
from anyventure.game.character.state import CharacterState, ResourcePool
from anyventure.game.world.templates import (
    InjuryTemplate,
    ItemTemplate,
    ItemType,
    ModuleKind,
    ModuleOption,
    ModuleTemplate,
    WeightClass,
)


@pytest.fixture(autouse=True)
def clear_settings_cache(monkeypatch):
    """Give every test default settings, independent of the environment."""
    for name in (
        "ANYVENTURE_DEFAULT_WALK_SPEED",
        "ANYVENTURE_PRONE_WALK_SPEED",
        "ANYVENTURE_BASE_SPELL_SLOTS",
        "ANYVENTURE_CONTENT_DIR",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo any logging configuration a test installs."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def make_item() -> Callable[..., ItemTemplate]:
    """Factory for item templates."""

    def _make(
        item_id: str,
        data_code: str = "",
        item_type: ItemType = ItemType.MISC,
        weight_class: WeightClass | None = None,
        **kwargs,
    ) -> ItemTemplate:
        return ItemTemplate(
            id=item_id,
            name=item_id.replace("_", " ").title(),
            type=item_type,
            weight_class=weight_class,
            data_code=data_code,
            **kwargs,
        )

    return _make


@pytest.fixture
def light_shield(make_item) -> ItemTemplate:
    """A light shield granting +1 deflection."""
    return make_item("buckler", "SSB=1", ItemType.SHIELD, WeightClass.LIGHT)


@pytest.fixture
def base_state() -> CharacterState:
    """Creation values for a simple character."""
    state = CharacterState()
    state.attributes.update(physique=2, finesse=3, mind=1, knowledge=1, social=2)
    state.basic["deflection"].value = 2
    state.basic["fitness"].value = 1
    state.resources = {
        "health": ResourcePool(max=10),
        "resolve": ResourcePool(max=8),
        "energy": ResourcePool(max=5),
        "morale": ResourcePool(max=10),
    }
    return state


@pytest.fixture
def character(base_state) -> Character:
    """An unbuilt character with no sources."""
    return Character(name="Tessaly", base=base_state)


@pytest.fixture
def warrior_module() -> ModuleTemplate:
    """A core module with two of three options selected."""
    return ModuleTemplate(
        id="warrior",
        name="Warrior",
        kind=ModuleKind.CORE,
        options=[
            ModuleOption(name="Weapon Training", data="WS5=1", selected=True),
            ModuleOption(name="Toughness", data="A1=3", selected=True),
            ModuleOption(name="Second Wind", data="XDNE=1", selected=False),
        ],
    )


@pytest.fixture
def cracked_rib() -> InjuryTemplate:
    return InjuryTemplate(id="cracked_rib", name="Cracked Rib", pain=4)
