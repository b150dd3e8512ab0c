"""Tests for character builds."""

from structlog.testing import capture_logs

from anyventure.game.effects.diagnostics import DiagnosticKind
from anyventure.game.systems.build import build_state, ordered_sources, rebuild
from anyventure.game.world.templates import ModuleKind, ModuleOption, ModuleTemplate


def module(module_id: str, kind: ModuleKind, *codes: str) -> ModuleTemplate:
    return ModuleTemplate(
        id=module_id,
        name=module_id.title(),
        kind=kind,
        options=[
            ModuleOption(name=f"option {index}", data=code, selected=True)
            for index, code in enumerate(codes)
        ],
    )


class TestBuildState:
    """Tests for build_state()."""

    def test_only_selected_options_apply(self, character, warrior_module):
        character.build_sources = [warrior_module]
        state = build_state(character)
        assert state.weapon["complex_melee_weapons"].value == 1
        assert state.resources["health"].max == 13
        assert state.abilities == []

    def test_base_is_not_modified(self, character, warrior_module):
        character.build_sources = [warrior_module]
        build_state(character)
        assert character.base.resources["health"].max == 10

    def test_build_order(self):
        sources = [
            module("warrior", ModuleKind.CORE),
            module("elf", ModuleKind.ANCESTRY),
            module("mystic", ModuleKind.SECONDARY),
            module("hardy", ModuleKind.TRAIT),
        ]
        assert [m.id for m in ordered_sources(sources)] == ["hardy", "elf", "warrior", "mystic"]

    def test_later_source_wins_trait_payload(self, character):
        character.build_sources = [
            module("warrior", ModuleKind.CORE, "TG=warrior"),
            module("hardy", ModuleKind.TRAIT, "TG=hardy"),
        ]
        state = build_state(character)
        # the trait applies first, so the module's payload wins
        assert [(t.code, t.payload) for t in state.traits] == [("TG", "warrior")]

    def test_options_within_a_module_merge(self, character):
        character.build_sources = [module("elf", ModuleKind.ANCESTRY, "SS2=1:IA=1", "SS2=1")]
        state = build_state(character)
        assert state.attributes["finesse"] == 5
        assert state.immunities == ["afraid"]

    def test_current_values_carry_over(self, character):
        rebuild(character)
        character.state.resources["health"].current = 4
        character.state.pain.modifier = 2
        state = build_state(character)
        assert state.resources["health"].current == 4
        assert state.pain.modifier == 2

    def test_broken_module_is_skipped(self, character, warrior_module):
        broken = ModuleTemplate.model_construct(
            id="broken",
            name="Broken",
            kind=ModuleKind.CORE,
            options=[ModuleOption.model_construct(name="x", data=3, selected=True)],
        )
        character.build_sources = [broken, warrior_module]
        rebuild(character)

        assert character.state.resources["health"].max == 13
        failures = character.build_diagnostics.of_kind(DiagnosticKind.SOURCE_FAILURE)
        assert [record.source for record in failures] == ["broken"]


class TestRebuild:
    """Tests for rebuild()."""

    def test_rebuild_captures_baseline(self, character, warrior_module):
        character.build_sources = [warrior_module]
        rebuild(character)
        assert character.baseline is not None
        assert character.baseline.state.resources["health"].max == 13

    def test_rebuild_replaces_baseline(self, character, warrior_module):
        rebuild(character)
        first = character.baseline
        character.build_sources = [warrior_module]
        rebuild(character)
        assert character.baseline is not first
        assert character.state.resources["health"].max == 13

    def test_build_modules_are_not_reapplied_by_recompute(self, character, warrior_module):
        from anyventure.game.systems.pipeline import recompute

        character.build_sources = [warrior_module]
        rebuild(character)
        recompute(character)
        recompute(character)
        assert character.state.weapon["complex_melee_weapons"].value == 1

    def test_rebuild_is_logged(self, character):
        with capture_logs() as logs:
            rebuild(character)
        assert any(entry["event"] == "character_rebuilt" for entry in logs)

    def test_build_diagnostics(self, character):
        character.build_sources = [module("odd", ModuleKind.CORE, "SSA=1:NOPE")]
        rebuild(character)
        assert len(character.build_diagnostics) == 1
        assert character.build_diagnostics.records[0].source == "odd"
        assert len(character.diagnostics) == 0
