"""Data-code parser.

Turns an authored data code such as ``"SSA=1:WT3=2:M1=3:CF[SSB=1]"`` into a
typed Delta. Tokens are separated by ``:``; each token matches one grammar
rule and updates one delta field. Anything the grammar does not recognize is
reported to the diagnostics channel and skipped.
"""

import re
from dataclasses import dataclass, field

import structlog

from anyventure.game.character.schema import (
    ATTRIBUTE_CODES,
    BASIC_SKILL_CODES,
    CRAFTING_SKILL_CODES,
    DUAL_WIELD_TIERS,
    FLAG_CODES,
    GATE_CODES,
    IMMUNITY_CODES,
    MAGIC_SKILL_CODES,
    MITIGATION_CODES,
    MOVEMENT_CODES,
    RESOURCE_CODES,
    TRAIT_CODES,
    WEAPON_MODIFICATION_CODES,
    WEAPON_SKILL_CODES,
    AbilityType,
    CombatFeature,
    ConditionalType,
)
from anyventure.game.effects.delta import (
    AbilityGrant,
    ConditionalEffect,
    Delta,
    SkillDelta,
    TraitMarker,
)
from anyventure.game.effects.diagnostics import DiagnosticKind, Diagnostics

logger = structlog.get_logger(__name__)

# Tier symbols: upgrade / downgrade one dice size
TIER_UP = "X"
TIER_DOWN = "Y"
TIER_STEPS = {TIER_UP: 1, TIER_DOWN: -1}


@dataclass
class _Context:
    """Per-call parsing context."""

    diagnostics: Diagnostics
    source: str | None = None


class DataCodeParser:
    """
    Parser for the colon-separated data-code grammar.

    Each pattern accepts the broad *shape* of a token. Category and target
    letters are then looked up in the schema tables, so a well-formed token
    with an unknown letter is reported as unrecognized rather than being
    mistaken for another rule.
    """

    TOKEN_SEPARATOR = ":"
    CONDITIONAL_SEPARATOR = ","

    # S S/T <target> = value ; SS1-SS5 are attributes
    SKILL_PATTERN = re.compile(r"^S([ST])([A-Z0-9])=(-?\d+|[XY])$", re.ASCII)
    WEAPON_PATTERN = re.compile(r"^W([ST])([A-Z0-9])=(-?\d+|[XY])$", re.ASCII)
    MAGIC_PATTERN = re.compile(r"^Y([ST])([A-Z0-9])=(-?\d+|[XY])$", re.ASCII)
    CRAFTING_PATTERN = re.compile(r"^C([ST])([A-Z0-9])=(-?\d+|[XY])$", re.ASCII)
    MITIGATION_PATTERN = re.compile(r"^M([A-Z0-9])=(-?\d+)$", re.ASCII)
    AUTO_PATTERN = re.compile(r"^A([A-Z0-9])=(-?\d+)$", re.ASCII)
    MOVEMENT_PATTERN = re.compile(r"^K([A-Z0-9])=(-?\d+)$", re.ASCII)
    IMMUNITY_PATTERN = re.compile(r"^I([A-Z])=1$", re.ASCII)
    CONDITIONAL_PATTERN = re.compile(r"^C([A-Z])\[([^\]]+)\]$", re.ASCII)
    FLAG_PATTERN = re.compile(r"^F([A-Z])$", re.ASCII)
    TALENT_POINTS_PATTERN = re.compile(r"^TP(?:=\d+)?$", re.ASCII)
    TRAIT_PATTERN = re.compile(r"^T([A-Z])(?:=(.+))?$", re.ASCII)
    ABILITY_PATTERN = re.compile(r"^([XZ])([ID])([MN])E=(\d+)$", re.ASCII)

    def __init__(self) -> None:
        """Initialize the parser and its dispatch table."""
        self._rules = [
            (self.SKILL_PATTERN, self._parse_skill),
            (self.WEAPON_PATTERN, self._parse_weapon),
            (self.MAGIC_PATTERN, self._parse_magic),
            (self.CRAFTING_PATTERN, self._parse_crafting),
            (self.MITIGATION_PATTERN, self._parse_mitigation),
            (self.AUTO_PATTERN, self._parse_auto),
            (self.MOVEMENT_PATTERN, self._parse_movement),
            (self.IMMUNITY_PATTERN, self._parse_immunity),
            (self.CONDITIONAL_PATTERN, self._parse_conditional),
            (self.FLAG_PATTERN, self._parse_flag),
            (self.TALENT_POINTS_PATTERN, self._ignore),
            (self.TRAIT_PATTERN, self._parse_trait),
            (self.ABILITY_PATTERN, self._parse_ability),
        ]

    def split(self, code: str) -> list[str]:
        """Split a data code into trimmed, non-empty tokens."""
        return [token.strip() for token in code.split(self.TOKEN_SEPARATOR) if token.strip()]

    def parse(
        self,
        code: str | None,
        *,
        source: str | None = None,
        diagnostics: Diagnostics | None = None,
    ) -> Delta:
        """
        Parse a data code into a Delta.

        Args:
            code: Data code string; None or "" yields the identity delta
            source: Identity of the authoring source, attached to diagnostics
            diagnostics: Collector for unrecognized tokens (a private one is used if omitted)

        Returns:
            Delta holding every recognized contribution

        Raises:
            TypeError: If code is neither None nor a string
        """
        delta = Delta()
        if code is None:
            return delta
        if not isinstance(code, str):
            raise TypeError(f"data code must be a string, got {type(code).__name__}")

        context = _Context(diagnostics=diagnostics if diagnostics is not None else Diagnostics(),
                           source=source)
        for token in self.split(code):
            self._parse_token(token, delta, context)
        return delta

    def _parse_token(self, token: str, delta: Delta, context: _Context) -> None:
        for pattern, handler in self._rules:
            match = pattern.match(token)
            if match:
                handler(match, token, delta, context)
                return
        self._unrecognized(token, "token matches no data-code rule", context)

    def _unrecognized(self, token: str, message: str, context: _Context) -> None:
        context.diagnostics.report(
            DiagnosticKind.UNRECOGNIZED_TOKEN,
            message,
            token=token,
            source=context.source,
        )

    def _ignore(self, match: re.Match[str], token: str, delta: Delta, context: _Context) -> None:
        """Talent point markers carry no mechanical effect."""

    def _parse_skill(self, match: re.Match[str], token: str, delta: Delta, context: _Context) -> None:
        kind, code, raw = match.groups()

        if kind == "T":
            self._unrecognized(token, "basic skill and attribute talents are not supported", context)
            return

        if code in ATTRIBUTE_CODES:
            if raw in TIER_STEPS:
                self._unrecognized(token, "attributes do not take tier symbols", context)
                return
            attribute = ATTRIBUTE_CODES[code]
            delta.attributes[attribute] += int(raw)
            return

        skill = BASIC_SKILL_CODES.get(code)
        if skill is None:
            self._unrecognized(token, f"unknown basic skill code '{code}'", context)
            return

        if raw in TIER_STEPS:
            delta.skill_tier_modifiers[skill] += TIER_STEPS[raw]
        else:
            delta.skills[skill] += int(raw)

    def _apply_skill_object(
        self,
        skills: dict,
        table: dict,
        match: re.Match[str],
        token: str,
        context: _Context,
        category: str,
    ) -> None:
        kind, code, raw = match.groups()
        name = table.get(code)
        if name is None:
            self._unrecognized(token, f"unknown {category} skill code '{code}'", context)
            return

        entry: SkillDelta = skills[name]
        if raw in TIER_STEPS:
            if kind == "T":
                self._unrecognized(token, "talents do not take tier symbols", context)
                return
            entry.tier += TIER_STEPS[raw]
        elif kind == "S":
            entry.skill += int(raw)
        else:
            entry.talent += int(raw)

    def _parse_weapon(self, match: re.Match[str], token: str, delta: Delta, context: _Context) -> None:
        self._apply_skill_object(
            delta.weapon_skills, WEAPON_SKILL_CODES, match, token, context, "weapon"
        )

    def _parse_magic(self, match: re.Match[str], token: str, delta: Delta, context: _Context) -> None:
        self._apply_skill_object(
            delta.magic_skills, MAGIC_SKILL_CODES, match, token, context, "magic"
        )

    def _parse_crafting(
        self, match: re.Match[str], token: str, delta: Delta, context: _Context
    ) -> None:
        self._apply_skill_object(
            delta.crafting_skills, CRAFTING_SKILL_CODES, match, token, context, "crafting"
        )

    def _parse_mitigation(
        self, match: re.Match[str], token: str, delta: Delta, context: _Context
    ) -> None:
        code, raw = match.groups()
        mitigation = MITIGATION_CODES.get(code)
        if mitigation is None:
            self._unrecognized(token, f"unknown mitigation code '{code}'", context)
            return
        delta.mitigation[mitigation] += int(raw)

    def _parse_auto(self, match: re.Match[str], token: str, delta: Delta, context: _Context) -> None:
        code, raw = match.groups()
        value = int(raw)

        if code in RESOURCE_CODES:
            delta.resources[RESOURCE_CODES[code]] += value
        elif code in WEAPON_MODIFICATION_CODES:
            delta.weapon_modifications[WEAPON_MODIFICATION_CODES[code]] += value
        elif code == "Z":
            if value not in DUAL_WIELD_TIERS:
                self._unrecognized(token, f"dual wield tier must be 1 or 2, got {value}", context)
                return
            feature = CombatFeature.DUAL_WIELD_TIER
            delta.combat_features[feature] = max(delta.combat_features[feature], value)
        else:
            self._unrecognized(token, f"unknown auto code '{code}'", context)

    def _parse_movement(
        self, match: re.Match[str], token: str, delta: Delta, context: _Context
    ) -> None:
        code, raw = match.groups()
        mode = MOVEMENT_CODES.get(code)
        if mode is None:
            self._unrecognized(token, f"unknown movement code '{code}'", context)
            return
        delta.movement[mode] += int(raw)

    def _parse_immunity(
        self, match: re.Match[str], token: str, delta: Delta, context: _Context
    ) -> None:
        (code,) = match.groups()
        condition = IMMUNITY_CODES.get(code)
        if condition is None:
            self._unrecognized(token, f"unknown immunity code '{code}'", context)
            return
        delta.immunities.add(condition)

    def _parse_conditional(
        self, match: re.Match[str], token: str, delta: Delta, context: _Context
    ) -> None:
        code, body = match.groups()
        gate = GATE_CODES.get(code)
        if gate is None:
            self._unrecognized(token, f"unknown conditional gate '{code}'", context)
            return

        for inner in body.split(self.CONDITIONAL_SEPARATOR):
            inner = inner.strip()
            if not inner:
                continue

            sub = Delta()
            self._parse_token(inner, sub, context)

            filed = delta.conditionals[gate]
            for skill, value in sub.skills.items():
                if value:
                    filed.append(ConditionalEffect(ConditionalType.SKILL, str(skill), value))
                    sub.skills[skill] = 0
            for mitigation, value in sub.mitigation.items():
                if value:
                    filed.append(
                        ConditionalEffect(ConditionalType.MITIGATION, str(mitigation), value)
                    )
                    sub.mitigation[mitigation] = 0

            # Only skill and mitigation adjustments can be gated
            if not sub.is_empty():
                self._unrecognized(
                    inner, f"effect cannot be gated by '{gate}'", context
                )

    def _parse_flag(self, match: re.Match[str], token: str, delta: Delta, context: _Context) -> None:
        (code,) = match.groups()
        flag = FLAG_CODES.get(code)
        if flag is None:
            self._unrecognized(token, f"unknown flag code '{code}'", context)
            return
        delta.flags[str(flag)] = True

    def _parse_trait(self, match: re.Match[str], token: str, delta: Delta, context: _Context) -> None:
        code, payload = match.groups()
        trait_type = TRAIT_CODES.get(code)
        if trait_type is None:
            self._unrecognized(token, f"unknown trait code '{code}'", context)
            return
        delta.add_trait(TraitMarker(type=trait_type, code=f"T{code}", payload=payload))

    def _parse_ability(
        self, match: re.Match[str], token: str, delta: Delta, context: _Context
    ) -> None:
        kind, frequency, magic, energy = match.groups()
        delta.abilities.append(
            AbilityGrant(
                type=AbilityType.ACTION if kind == "X" else AbilityType.REACTION,
                daily=frequency == "D",
                magical=magic == "M",
                energy=int(energy),
            )
        )


_parser = DataCodeParser()


def parse(
    code: str | None,
    *,
    source: str | None = None,
    diagnostics: Diagnostics | None = None,
) -> Delta:
    """
    Parse a data code with the shared parser.

    Args:
        code: Data code string
        source: Source identity for diagnostics
        diagnostics: Collector for unrecognized tokens

    Returns:
        Parsed Delta
    """
    return _parser.parse(code, source=source, diagnostics=diagnostics)


@dataclass
class ValidationResult:
    """Outcome of validating a data code."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)


def validate_data_code(code: str | None) -> ValidationResult:
    """
    Check a data code for tokens the parser would skip.

    Empty codes are valid.

    Args:
        code: Data code to check

    Returns:
        ValidationResult listing one error per unrecognized token
    """
    diagnostics = Diagnostics(log=False)
    try:
        _parser.parse(code, diagnostics=diagnostics)
    except TypeError as e:
        return ValidationResult(is_valid=False, errors=[str(e)])

    errors = [f"Invalid effect: {record.token} ({record.message})" for record in diagnostics]
    if errors:
        logger.debug("data_code_invalid", code=code, errors=len(errors))
    return ValidationResult(is_valid=not errors, errors=errors)
