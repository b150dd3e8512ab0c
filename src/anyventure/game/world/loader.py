"""
Content loader module for Anyventure.

Handles loading item, injury and module templates from YAML files, and
assembling characters that reference them.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import ValidationError

from anyventure.game.character.character import EQUIPMENT_SLOTS, Character
from anyventure.game.character.state import LEGACY_TIER_FIELDS, CharacterState, ResourcePool
from anyventure.game.world.templates import (
    CharacterTemplate,
    InjuryTemplate,
    ItemTemplate,
    ModuleTemplate,
)

logger = structlog.get_logger(__name__)


class ContentLoadError(Exception):
    """Raised when there's an error loading content data."""

    pass


class ContentValidationError(Exception):
    """Raised when content validation fails."""

    pass


# Top-level YAML keys and the template each holds
CONTENT_SECTIONS: dict[str, type[ItemTemplate | InjuryTemplate | ModuleTemplate]] = {
    "items": ItemTemplate,
    "injuries": InjuryTemplate,
    "modules": ModuleTemplate,
}


@dataclass
class ContentLibrary:
    """All templates loaded from a content directory, keyed by id."""

    items: dict[str, ItemTemplate] = field(default_factory=dict)
    injuries: dict[str, InjuryTemplate] = field(default_factory=dict)
    modules: dict[str, ModuleTemplate] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.items) + len(self.injuries) + len(self.modules)


def load_yaml_file(file_path: Path) -> dict[str, Any]:
    """
    Load a YAML content file.

    Args:
        file_path: Path to the YAML file

    Returns:
        Mapping of top-level keys to their data

    Raises:
        ContentLoadError: If the file cannot be loaded or parsed
    """
    try:
        with open(file_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ContentLoadError(f"YAML parsing error in {file_path}: {e}") from e
    except FileNotFoundError as e:
        raise ContentLoadError(f"File not found: {file_path}") from e
    except OSError as e:
        raise ContentLoadError(f"Error loading {file_path}: {e}") from e

    if not data:
        raise ContentLoadError(f"Empty YAML file: {file_path}")

    if not isinstance(data, dict):
        raise ContentLoadError(f"Top level of {file_path} must be a mapping")

    return data


def parse_section(
    data: dict[str, Any], section: str, file_path: Path
) -> list[ItemTemplate | InjuryTemplate | ModuleTemplate]:
    """
    Validate one section of a content file into templates.

    Args:
        data: Loaded YAML mapping
        section: Section key ("items", "injuries" or "modules")
        file_path: Source file (for error messages)

    Returns:
        Templates in file order (empty if the section is absent)

    Raises:
        ContentValidationError: If the section is not a list or an entry is invalid
    """
    entries = data.get(section)
    if entries is None:
        return []

    if not isinstance(entries, list):
        raise ContentValidationError(f"'{section}' must be a list in {file_path}")

    model = CONTENT_SECTIONS[section]
    templates = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise ContentValidationError(f"Entry in '{section}' of {file_path} must be a mapping")
        try:
            templates.append(model.model_validate(entry))
        except ValidationError as e:
            entry_id = entry.get("id", "unknown")
            raise ContentValidationError(
                f"Invalid entry '{entry_id}' in '{section}' of {file_path}: {e}"
            ) from e
    return templates


def load_content(directory: Path) -> ContentLibrary:
    """
    Load every YAML content file in a directory.

    Duplicate ids keep the first definition and log a warning. Files that
    cannot be read are logged and skipped; invalid entries raise.

    Args:
        directory: Content directory

    Returns:
        ContentLibrary with all templates

    Raises:
        ContentLoadError: If directory is not a directory
        ContentValidationError: If an entry fails validation
    """
    library = ContentLibrary()

    if not directory.exists():
        logger.warning("content_directory_not_found", directory=str(directory))
        return library

    if not directory.is_dir():
        raise ContentLoadError(f"Not a directory: {directory}")

    yaml_files = sorted(list(directory.glob("*.yaml")) + list(directory.glob("*.yml")))
    if not yaml_files:
        logger.warning("no_content_yaml_files_found", directory=str(directory))
        return library

    for yaml_file in yaml_files:
        try:
            data = load_yaml_file(yaml_file)
        except ContentLoadError as e:
            logger.warning("content_file_load_error", file=str(yaml_file), error=str(e))
            continue

        for section in CONTENT_SECTIONS:
            target: dict[str, Any] = getattr(library, section)
            for template in parse_section(data, section, yaml_file):
                if template.id in target:
                    logger.warning(
                        "duplicate_content_id",
                        section=section,
                        content_id=template.id,
                        file=str(yaml_file),
                    )
                    continue
                target[template.id] = template

    logger.info(
        "content_loaded",
        directory=str(directory),
        items=len(library.items),
        injuries=len(library.injuries),
        modules=len(library.modules),
    )
    return library


def _lookup(table: dict[str, Any], key: str, kind: str, character: str) -> Any:
    if key not in table:
        raise ContentValidationError(f"Character '{character}' references unknown {kind} '{key}'")
    return table[key]


def _base_state(template: CharacterTemplate) -> CharacterState:
    """Build creation values from a character template."""
    base = CharacterState()

    for name, value in template.attributes.items():
        if name not in base.attributes:
            raise ContentValidationError(
                f"Character '{template.name}' has unknown attribute '{name}'"
            )
        base.attributes[name] = value

    for name, value in template.skills.items():
        skill = base.skill(name)
        if skill is None:
            raise ContentValidationError(f"Character '{template.name}' has unknown skill '{name}'")
        skill.value = value

    for name, tiers in template.skill_tiers.items():
        skill = base.skill(name)
        if skill is None:
            raise ContentValidationError(f"Character '{template.name}' has unknown skill '{name}'")
        for key, value in tiers.items():
            if key == "tier":
                skill.tier = value
            elif key in LEGACY_TIER_FIELDS:
                skill.legacy[key] = value
            else:
                raise ContentValidationError(
                    f"Character '{template.name}' has unknown tier field '{key}' on '{name}'"
                )

    for name, maximum in template.resources.items():
        base.resources.setdefault(name, ResourcePool()).max = maximum

    for name, current in template.current.items():
        if name not in base.resources:
            raise ContentValidationError(
                f"Character '{template.name}' sets current value of unknown resource '{name}'"
            )
        base.resources[name].current = current

    return base


def build_character(template: CharacterTemplate, library: ContentLibrary) -> Character:
    """
    Assemble an unbuilt Character from a template and loaded content.

    Args:
        template: Validated character document
        library: Loaded content to resolve ids against

    Returns:
        Character ready for rebuild()

    Raises:
        ContentValidationError: If the template references unknown content
    """
    modules: list[ModuleTemplate] = []
    for module_id, option_names in template.modules.items():
        module = _lookup(library.modules, module_id, "module", template.name).model_copy(deep=True)
        known = {option.name for option in module.options}
        for option_name in option_names:
            if option_name not in known:
                raise ContentValidationError(
                    f"Module '{module_id}' has no option '{option_name}'"
                )
        for option in module.options:
            option.selected = option.name in option_names
        modules.append(module)

    equipment: dict[str, ItemTemplate | None] = {slot: None for slot in EQUIPMENT_SLOTS}
    for slot, item_id in template.equipment.items():
        if slot not in equipment:
            raise ContentValidationError(
                f"Character '{template.name}' uses unknown equipment slot '{slot}'"
            )
        equipment[slot] = _lookup(library.items, item_id, "item", template.name)

    character = Character(
        name=template.name,
        base=_base_state(template),
        build_sources=modules,
        trainings=[
            _lookup(library.items, item_id, "item", template.name)
            for item_id in template.trainings
        ],
        equipment=equipment,
        injuries=[
            _lookup(library.injuries, injury_id, "injury", template.name)
            for injury_id in template.injuries
        ],
        conditions=set(template.conditions),
    )
    character.state.pain.modifier = template.pain_modifier
    character.state.stress.modifier = template.stress_modifier
    return character


def load_character(file_path: Path, library: ContentLibrary) -> Character:
    """
    Load a character document from YAML.

    Args:
        file_path: Character YAML file
        library: Loaded content

    Returns:
        Unbuilt Character

    Raises:
        ContentLoadError: If the file cannot be loaded
        ContentValidationError: If the document is invalid
    """
    data = load_yaml_file(file_path)
    try:
        template = CharacterTemplate.model_validate(data)
    except ValidationError as e:
        raise ContentValidationError(f"Invalid character in {file_path}: {e}") from e

    character = build_character(template, library)
    logger.info("character_loaded", character=character.name, file=str(file_path))
    return character
