"""Content templates and the YAML content loader."""

from .templates import (
    CharacterTemplate,
    InjuryTemplate,
    ItemTemplate,
    ItemType,
    ModuleKind,
    ModuleOption,
    ModuleTemplate,
    WeightClass,
)

__all__ = [
    "CharacterTemplate",
    "InjuryTemplate",
    "ItemTemplate",
    "ItemType",
    "ModuleKind",
    "ModuleOption",
    "ModuleTemplate",
    "WeightClass",
]
