"""Crosswalk resolution — zone attributes to a secondary billing code.

Rules are checked in table order and the first whose every match pair
equals the record's attribute wins. A rule carrying a reason is a
provisional mapping; downstream consumers see that reason per zone.
"""

from parkzone.core.types import (
    RESOLUTION_CONFIRMED,
    RESOLUTION_PROVISIONAL,
    RESOLUTION_UNRESOLVED,
    CodeResolution,
    CrosswalkRule,
    ZoneAttributes,
)


def normalize_code(value: str | None) -> str | None:
    """Strip whitespace; blank codes count as no code."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def composed_key(attributes: ZoneAttributes, fields: tuple[str, ...]) -> str:
    """'zone_type=Meter|meter_zone=Zone 1' (used for messages and diagnostics)."""
    return "|".join(f"{name}={getattr(attributes, name, '')}" for name in fields)


class Crosswalk:
    """An ordered, read-only crosswalk table.

    Args:
        rules: CrosswalkRules in priority order.
        key_fields: attribute names this dataset's rules key on; only used
            to describe a miss in the unresolved reason.
    """

    def __init__(self, rules: list[CrosswalkRule] | None = None, key_fields: tuple[str, ...] = ()):
        self._rules = tuple(rules or ())
        self.key_fields = key_fields

    def __len__(self) -> int:
        return len(self._rules)

    @property
    def rules(self) -> tuple[CrosswalkRule, ...]:
        return self._rules

    def find_rule(self, attributes: ZoneAttributes) -> CrosswalkRule | None:
        for rule in self._rules:
            if all(str(getattr(attributes, name, "")) == value for name, value in rule.match):
                return rule
        return None

    def resolve(self, attributes: ZoneAttributes) -> CodeResolution:
        rule = self.find_rule(attributes)
        if rule is None:
            reason = None
            if self._rules:
                key = composed_key(attributes, self.key_fields) if self.key_fields else attributes.zone_id
                reason = f"No crosswalk rule matched {key}."
            return CodeResolution(code=None, reason=reason, status=RESOLUTION_UNRESOLVED)

        code = normalize_code(rule.resolved_code)
        if code is None:
            return CodeResolution(
                code=None,
                reason=f"Crosswalk rule {rule.rule_id} has a blank code.",
                status=RESOLUTION_UNRESOLVED,
                rule_id=rule.rule_id,
            )

        status = RESOLUTION_PROVISIONAL if rule.reason else RESOLUTION_CONFIRMED
        return CodeResolution(code=code, reason=rule.reason, status=status, rule_id=rule.rule_id)
