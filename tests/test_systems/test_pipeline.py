"""Tests for the overlay pipeline and recompute()."""

import pytest

from anyventure.game.character.character import RecomputeStatus
from anyventure.game.character.schema import Gate
from anyventure.game.character.state import ResourcePool
from anyventure.game.effects.diagnostics import DiagnosticKind
from anyventure.game.systems import pipeline
from anyventure.game.systems.build import rebuild
from anyventure.game.systems.pipeline import (
    PIPELINE_STAGES,
    PipelineInvariantError,
    RecomputeInProgressError,
    RecomputePass,
    derive_talents,
    recompute,
    satisfied_gates,
)
from anyventure.game.world.templates import ItemTemplate, ItemType, WeightClass


@pytest.fixture
def equipped_character(character, make_item, light_shield, cracked_rib):
    """A built character with one of every kind of source."""
    character.trainings = [
        make_item("shield_discipline", "CF[SSB=1]:CE[M1=1]", ItemType.TRAINING),
        make_item("fencing", "WS5=1:WS5=X:SSE=1", ItemType.TRAINING),
    ]
    character.equipment["body"] = make_item(
        "leather", "M1=1:K1=-1", ItemType.ARMOR, WeightClass.LIGHT, encumbrance_penalty=1
    )
    character.equipment["offhand"] = light_shield
    character.equipment["accessory1"] = make_item(
        "amulet",
        "A1=2:IC=1",
        ItemType.ACCESSORY,
        detections={"darkvision": 6},
        effects=["night_sight"],
        immunities=["deafened"],
    )
    character.injuries = [cracked_rib]
    character.conditions = {"blinded", "prone"}
    rebuild(character)
    return character


class TestStageOrder:
    """The pipeline runs its stages in a fixed order."""

    def test_stage_list(self):
        assert [stage.__name__ for stage in PIPELINE_STAGES] == [
            "normalize_tiers",
            "derive_talents",
            "apply_training",
            "apply_equipment",
            "apply_gate_bonuses",
            "apply_injuries",
            "apply_conditions",
            "finalize_movement",
            "clamp_resources",
        ]


class TestIdempotence:
    """Recomputing with unchanged inputs changes nothing."""

    def test_repeated_recompute(self, equipped_character):
        first = equipped_character.state.to_dict()
        recompute(equipped_character)
        second = equipped_character.state.to_dict()
        recompute(equipped_character)
        assert first == second == equipped_character.state.to_dict()

    def test_baseline_is_untouched(self, equipped_character):
        before = equipped_character.baseline.state.to_dict()
        recompute(equipped_character)
        recompute(equipped_character)
        assert equipped_character.baseline.state.to_dict() == before

    def test_overlays_do_not_accumulate(self, equipped_character):
        recompute(equipped_character)
        recompute(equipped_character)
        # leather 1, then the any-shield gate filed by training adds 1
        assert equipped_character.state.mitigation["physical"] == 2
        assert equipped_character.state.basic["evasion"].value == 1


class TestEquipment:
    """Equipment deltas and their structured extras."""

    def test_extras(self, equipped_character):
        state = equipped_character.state
        assert state.encumbrance_penalty == 1
        assert state.detections == {"darkvision": 6}
        assert state.granted_effects == ["night_sight"]
        assert state.immunities == ["blinded", "deafened"]

    def test_resource_maxima(self, equipped_character):
        assert equipped_character.state.resources["health"].max == 12

    def test_unequip_removes_bonus(self, equipped_character):
        equipped_character.unequip("accessory1")
        state = equipped_character.state
        assert state.resources["health"].max == 10
        assert state.detections == {}
        assert state.immunities == []

    def test_unknown_slot(self, equipped_character, light_shield):
        with pytest.raises(ValueError):
            equipped_character.equip("tail", light_shield)


class TestConditionalLayering:
    """Gate bonuses stack on post-equipment values."""

    def test_light_shield_gate(self, character, make_item, light_shield):
        character.trainings = [make_item("shield_drill", "CF[SSB=1]", ItemType.TRAINING)]
        character.equipment["offhand"] = light_shield
        rebuild(character)
        # base 2 + shield 1 + light shield gate 1
        assert character.state.basic["deflection"].value == 4

    def test_gate_needs_matching_gear(self, character, make_item):
        character.trainings = [make_item("shield_drill", "CF[SSB=1]", ItemType.TRAINING)]
        rebuild(character)
        assert character.state.basic["deflection"].value == 2

    def test_gate_from_build_module(self, character, light_shield):
        from anyventure.game.world.templates import ModuleKind, ModuleOption, ModuleTemplate

        character.build_sources = [
            ModuleTemplate(
                id="guardian",
                name="Guardian",
                kind=ModuleKind.CORE,
                options=[ModuleOption(name="Wall", data="CE[M1=2]", selected=True)],
            )
        ]
        rebuild(character)
        assert character.state.mitigation["physical"] == 0

        character.equip("offhand", light_shield)
        assert character.state.mitigation["physical"] == 2

    def test_satisfied_gates_recorded(self, equipped_character):
        assert equipped_character.state.satisfied_gates == [
            "light_armor",
            "any_armor",
            "any_shield",
            "light_shield",
        ]


class TestSatisfiedGates:
    """Tests for gate evaluation."""

    def test_nothing_equipped(self):
        assert satisfied_gates({}) == [Gate.NO_ARMOR]

    def test_heavy_armor_and_heavy_shield(self, make_item):
        equipment = {
            "body": make_item("plate", item_type=ItemType.ARMOR, weight_class=WeightClass.HEAVY),
            "mainhand": make_item(
                "tower", item_type=ItemType.SHIELD, weight_class=WeightClass.HEAVY
            ),
        }
        assert satisfied_gates(equipment) == [
            Gate.HEAVY_ARMOR,
            Gate.ANY_ARMOR,
            Gate.ANY_SHIELD,
            Gate.HEAVY_SHIELD,
        ]

    def test_non_armor_in_body_slot(self, make_item):
        equipment = {"body": make_item("robe", item_type=ItemType.MISC)}
        assert satisfied_gates(equipment) == [Gate.NO_ARMOR]


class TestTiersAndTalents:
    """Stages 1 and 2."""

    def test_legacy_tier_fields_fold(self, character, make_item):
        sword = character.base.weapon["complex_melee_weapons"]
        sword.tier = None
        sword.legacy = {"diceTierModifier": 1, "tierModifier": 1}
        character.trainings = [make_item("fencing", "WS5=X", ItemType.TRAINING)]
        rebuild(character)
        recompute(character)

        assert character.state.weapon["complex_melee_weapons"].tier == 3
        assert character.state.weapon["complex_melee_weapons"].legacy == {}

    def test_missing_tier_defaults_to_zero(self, character):
        character.base.magic["black"].tier = None
        rebuild(character)
        assert character.state.magic["black"].tier == 0

    def test_talents_follow_attributes(self, character):
        rebuild(character)
        assert character.state.basic["fitness"].talent == 2
        assert character.state.basic["evasion"].talent == 3
        assert character.state.basic["persuasion"].talent == 2

    def test_talent_is_overwritten(self, character):
        rebuild(character)
        character.state.basic["fitness"].talent = 9
        pass_ = RecomputePass(character)
        pass_.restore()
        pass_.run_stage(derive_talents)
        assert character.state.basic["fitness"].talent == 2


class TestInjuries:
    """Stage 6 inside the pipeline."""

    def test_pain_from_injury_and_low_health(self, equipped_character):
        equipped_character.state.resources["health"].current = 3
        recompute(equipped_character)
        pain = equipped_character.state.pain
        # max health 12, current 3 is at or below a quarter
        assert pain.source_total == 4
        assert pain.threshold_bonus == 6
        assert pain.calculated == 10
        assert pain.penalty_dice == 1

    def test_manual_modifier_survives(self, equipped_character):
        equipped_character.state.pain.modifier = 2
        recompute(equipped_character)
        recompute(equipped_character)
        assert equipped_character.state.pain.calculated == 6

    def test_removing_injury(self, equipped_character):
        equipped_character.remove_injury("cracked_rib")
        assert equipped_character.state.pain.calculated == 0


class TestConditionsAndMovement:
    """Stages 7 and 8."""

    def test_immune_conditions_are_filtered(self, equipped_character):
        assert equipped_character.state.effective_conditions == ["prone"]

    def test_prone_walk(self, equipped_character):
        assert equipped_character.state.movement["walk"] == 1

    def test_walk_without_conditions(self, equipped_character):
        equipped_character.remove_condition("prone")
        # default 5 with the leather armor's -1
        assert equipped_character.state.movement["walk"] == 4

    def test_prone_immunity(self, equipped_character, make_item):
        equipped_character.equip("boots", make_item("steady_boots", "IJ=1"))
        assert equipped_character.state.movement["walk"] == 4

    def test_immobilizing_condition(self, equipped_character):
        equipped_character.add_condition("stunned")
        assert equipped_character.state.movement["walk"] == 0

    def test_prone_sets_walk_even_when_slower(self, character, make_item):
        character.equipment["boots"] = make_item("lead_boots", "K1=-5")
        character.conditions = {"prone"}
        rebuild(character)
        assert character.state.movement["walk"] == 1

    def test_legacy_standard_movement(self, character):
        character.base.movement = {"standard": 4}
        rebuild(character)
        assert character.state.movement == {"walk": 4, "swim": 0, "climb": 0, "fly": 0}

    def test_movement_bonus_applied_once(self, character, make_item):
        character.equipment["boots"] = make_item("striders", "K1=1:K2=2")
        rebuild(character)
        recompute(character)
        assert character.state.movement["walk"] == 6
        assert character.state.movement["swim"] == 2


class TestResourceClamping:
    """Stage 9: current values are capped, never raised."""

    def test_unseeded_current_starts_at_max(self, character):
        rebuild(character)
        assert character.state.resources["health"].current == 10

    def test_clamp_never_heals(self, character, make_item):
        character.base.resources["health"] = ResourcePool(max=10, current=10)
        rebuild(character)

        character.equip("accessory1", make_item("cursed_ring", "A1=-2"))
        assert character.state.resources["health"].max == 8
        assert character.state.resources["health"].current == 8

        character.unequip("accessory1")
        assert character.state.resources["health"].max == 10
        assert character.state.resources["health"].current == 8

    def test_current_below_max_is_kept(self, character):
        character.base.resources["health"] = ResourcePool(max=10, current=3)
        rebuild(character)
        assert character.state.resources["health"].current == 3


class TestFailSoft:
    """One broken source never blocks the rest."""

    def test_broken_equipment(self, character, make_item):
        broken = ItemTemplate.model_construct(id="broken_charm", name="Broken", data_code=42)
        character.equipment["accessory1"] = broken
        character.equipment["accessory2"] = make_item("good_charm", "M1=2")
        rebuild(character)

        assert character.state.mitigation["physical"] == 2
        failures = character.diagnostics.of_kind(DiagnosticKind.SOURCE_FAILURE)
        assert [record.source for record in failures] == ["broken_charm"]

    def test_broken_training(self, character, make_item):
        character.trainings = [
            ItemTemplate.model_construct(id="torn_manual", name="Torn", data_code=["SSA=1"]),
            make_item("drills", "SSA=1"),
        ]
        rebuild(character)
        assert character.state.basic["fitness"].value == 2
        assert character.diagnostics.for_source("torn_manual")

    def test_unrecognized_tokens_keep_the_rest(self, character, make_item):
        character.equipment["head"] = make_item("odd_hat", "SSK=1:WHAT:M2=1")
        rebuild(character)
        assert character.state.basic["senses"].value == 1
        assert character.state.mitigation["heat"] == 1
        assert len(character.diagnostics.of_kind(DiagnosticKind.UNRECOGNIZED_TOKEN)) == 1

    def test_diagnostics_reset_each_pass(self, character, make_item):
        character.equipment["head"] = make_item("odd_hat", "WHAT")
        rebuild(character)
        recompute(character)
        recompute(character)
        assert len(character.diagnostics) == 1


class TestPipelineInvariants:
    """Misusing a pass raises."""

    def test_stage_before_restore(self, character):
        rebuild(character)
        pass_ = RecomputePass(character)
        with pytest.raises(PipelineInvariantError):
            pass_.run_stage(derive_talents)

    def test_double_restore(self, character):
        rebuild(character)
        pass_ = RecomputePass(character)
        pass_.restore()
        with pytest.raises(PipelineInvariantError):
            pass_.restore()

    def test_restore_without_baseline(self, character):
        with pytest.raises(PipelineInvariantError):
            RecomputePass(character).restore()


class TestReentrancy:
    """Nested recomputes are rejected; nested mutations are queued."""

    def test_unbuilt_character_is_built_first(self, character):
        assert character.baseline is None
        recompute(character)
        assert character.baseline is not None
        assert character.status is RecomputeStatus.IDLE

    def test_nested_recompute_is_rejected(self, character, monkeypatch):
        rebuild(character)

        def nested(pass_):
            recompute(pass_.character)

        monkeypatch.setattr(pipeline, "PIPELINE_STAGES", [*PIPELINE_STAGES, nested])
        with pytest.raises(RecomputeInProgressError):
            recompute(character)
        assert character.status is RecomputeStatus.IDLE

    def test_rebuild_during_pass_is_rejected(self, character, monkeypatch):
        rebuild(character)

        def nested(pass_):
            rebuild(pass_.character)

        monkeypatch.setattr(pipeline, "PIPELINE_STAGES", [*PIPELINE_STAGES, nested])
        with pytest.raises(RecomputeInProgressError):
            recompute(character)

    def test_mutation_during_pass_is_queued(self, character, monkeypatch):
        rebuild(character)
        passes = []

        def mutating(pass_):
            passes.append(pass_)
            if len(passes) == 1:
                pass_.character.add_condition("stunned")

        monkeypatch.setattr(pipeline, "PIPELINE_STAGES", [*PIPELINE_STAGES, mutating])
        recompute(character)

        assert len(passes) == 2
        assert character.state.effective_conditions == ["stunned"]
        assert character.state.movement["walk"] == 0
        assert character.status is RecomputeStatus.IDLE
