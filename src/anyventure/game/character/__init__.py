"""Character schema, working state and the Character aggregate."""

from .character import EQUIPMENT_SLOTS, Character, RecomputeStatus
from .state import CharacterState, InjuryTrack, ResourcePool, SkillValue

__all__ = [
    "EQUIPMENT_SLOTS",
    "Character",
    "CharacterState",
    "InjuryTrack",
    "RecomputeStatus",
    "ResourcePool",
    "SkillValue",
]
