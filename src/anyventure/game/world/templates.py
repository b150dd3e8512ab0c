"""
Content templates for Anyventure sources.

Items, trainings, injuries and character-build modules are authored in YAML
and validated into these models. Each carries the data code the engine
parses, plus any structured fields that sit beside it.
"""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class ItemType(StrEnum):
    """Item categories."""

    WEAPON = "weapon"
    ARMOR = "armor"
    SHIELD = "shield"
    ACCESSORY = "accessory"
    TRAINING = "training"
    MISC = "misc"


class WeightClass(StrEnum):
    """Armor and shield weight classes."""

    LIGHT = "light"
    HEAVY = "heavy"


class ItemTemplate(BaseModel):
    """
    Item template loaded from YAML data.

    Attributes:
        id: Unique identifier (e.g., "buckler", "fencing_lessons")
        name: Display name
        description: Flavor text
        type: Item category; armor and shield items take part in gate checks
        weight_class: Light or heavy, for armor and shields
        data_code: Colon-separated effect code (e.g., "SSB=1:M1=1")
        encumbrance_penalty: Penalty added while equipped
        detections: Detection ranges granted while equipped (e.g., {"darkvision": 6})
        effects: Named effects granted while equipped
        immunities: Condition immunities granted while equipped
    """

    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., description="Unique item template identifier")
    name: str = Field(..., description="Display name of the item")
    description: str = Field(default="", description="Item description")
    type: ItemType = Field(default=ItemType.MISC, description="Item category")
    weight_class: WeightClass | None = Field(
        default=None, description="Weight class for armor and shields"
    )
    data_code: str | None = Field(default=None, description="Effect data code")
    encumbrance_penalty: int = Field(default=0, description="Encumbrance penalty while equipped")
    detections: dict[str, int] = Field(default_factory=dict, description="Granted detections")
    effects: list[str] = Field(default_factory=list, description="Granted effect names")
    immunities: list[str] = Field(default_factory=list, description="Granted immunities")


class InjuryTemplate(BaseModel):
    """
    Injury template.

    Attributes:
        id: Unique identifier
        name: Display name
        pain: Pain contributed while active
        stress: Stress contributed while active
    """

    id: str = Field(..., description="Unique injury identifier")
    name: str = Field(..., description="Display name of the injury")
    pain: int = Field(default=0, ge=0, description="Pain contribution")
    stress: int = Field(default=0, ge=0, description="Stress contribution")


class ModuleKind(StrEnum):
    """Build sources, in the order they are applied."""

    TRAIT = "trait"
    ANCESTRY = "ancestry"
    CORE = "core"
    SECONDARY = "secondary"
    PERSONALITY = "personality"


# Application order during a build: traits, then ancestry, then modules
BUILD_ORDER: dict[ModuleKind, int] = {
    ModuleKind.TRAIT: 0,
    ModuleKind.ANCESTRY: 1,
    ModuleKind.CORE: 2,
    ModuleKind.SECONDARY: 2,
    ModuleKind.PERSONALITY: 2,
}


class ModuleOption(BaseModel):
    """One option of a module; only selected options contribute."""

    name: str = Field(..., description="Option name")
    data: str | None = Field(default=None, description="Effect data code")
    selected: bool = Field(default=False, description="Whether the option is chosen")
    location: str | None = Field(default=None, description="Position in the module tree")


class ModuleTemplate(BaseModel):
    """
    Trait, ancestry or module with selectable options.

    Attributes:
        id: Unique identifier
        name: Display name
        kind: Build source category
        options: Options in authoring order
    """

    id: str = Field(..., description="Unique module identifier")
    name: str = Field(..., description="Display name of the module")
    kind: ModuleKind = Field(default=ModuleKind.CORE, description="Build source category")
    options: list[ModuleOption] = Field(default_factory=list, description="Module options")

    def selected_options(self) -> list[ModuleOption]:
        """Get the options that contribute to a build."""
        return [option for option in self.options if option.selected]


class CharacterTemplate(BaseModel):
    """
    Character document as authored in YAML.

    Module selections name option names per module id; equipment maps slot
    names to item ids.
    """

    name: str = Field(..., description="Character name")
    attributes: dict[str, int] = Field(default_factory=dict, description="Base attributes")
    skills: dict[str, int] = Field(default_factory=dict, description="Base skill values, any category")
    skill_tiers: dict[str, dict[str, int]] = Field(
        default_factory=dict,
        description="Tier fields per skill of any category, under 'tier' or a legacy name",
    )
    resources: dict[str, int] = Field(default_factory=dict, description="Base resource maxima")
    current: dict[str, int] = Field(default_factory=dict, description="Current resource values")
    modules: dict[str, list[str]] = Field(
        default_factory=dict, description="Selected option names per module id"
    )
    trainings: list[str] = Field(default_factory=list, description="Training item ids")
    equipment: dict[str, str] = Field(default_factory=dict, description="Slot -> item id")
    injuries: list[str] = Field(default_factory=list, description="Active injury ids")
    conditions: list[str] = Field(default_factory=list, description="Active condition names")
    pain_modifier: int = Field(default=0, description="Manual pain modifier")
    stress_modifier: int = Field(default=0, description="Manual stress modifier")
