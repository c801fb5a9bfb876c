"""
Contradiction detection for logic rules.

A rule contradicts itself when two of its actions apply opposite toggles
(visible / not visible, required / not required) to the same target.
Any warning blocks saving the rule set.

Cross-rule analysis is optional: two rules can fire together unless
their conditions are mutually exclusive. Across such rules, opposite
toggles on the same target are reported on both, and so are input
actions that assign the same input two different values.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Sequence

from deal_logic.core.ir.rules import (
    EFFECT_LABELS,
    VALUE_EFFECTS,
    Action,
    Condition,
    Effect,
    InputAction,
    LogicRule,
    Operator,
    ValueMode,
)

LabelLookup = Callable[[str | int], str]

# Conflicting effect pairs, in the order their warnings are reported
_OPPOSITES: tuple[tuple[Effect, Effect], ...] = (
    (Effect.VISIBLE, Effect.NOT_VISIBLE),
    (Effect.REQUIRED, Effect.NOT_REQUIRED),
)


def _default_category_label(category_id: str | int) -> str:
    return f"Category #{category_id}"


def _conflict_message(label: str, positive: Effect, negative: Effect) -> str:
    return f'"{label}" is set to both {EFFECT_LABELS[positive]} and {EFFECT_LABELS[negative]}.'


def _target_key(action: Action) -> Hashable | None:
    """Identity of what an action points at; None while no target is picked.

    Inputs and categories live in separate id spaces, so input actions
    key on ``(target_type, id)``.
    """
    if isinstance(action, InputAction):
        target = action.target_id
        kind = "category" if action.is_category else "input"
        return None if target in ("", 0, None) else (kind, target)
    return None if action.target in ("", 0, None) else action.target


def _label(action: Action, label_for: LabelLookup, category_label_for: LabelLookup) -> str:
    if isinstance(action, InputAction) and action.is_category:
        return category_label_for(action.category_id)
    return label_for(action.target)


def detect_contradictions(
    actions: Sequence[Action],
    label_for: LabelLookup,
    category_label_for: LabelLookup | None = None,
) -> list[str]:
    """Warnings for opposite toggles on the same target within one rule."""
    category_label_for = category_label_for or _default_category_label
    effects_by_target: dict[Hashable, set[Effect]] = {}
    first_action: dict[Hashable, Action] = {}
    for action in actions:
        key = _target_key(action)
        if key is None:
            continue
        effects_by_target.setdefault(key, set()).add(Effect(action.effect))
        first_action.setdefault(key, action)

    warnings: list[str] = []
    for key, effects in effects_by_target.items():
        for positive, negative in _OPPOSITES:
            if positive in effects and negative in effects:
                label = _label(first_action[key], label_for, category_label_for)
                warnings.append(_conflict_message(label, positive, negative))
    return warnings


def conditions_mutually_exclusive(a: Sequence[Condition], b: Sequence[Condition]) -> bool:
    """True when some literal ``equals`` pair pins one field to two different values."""
    for ca in a:
        if not _literal_equals(ca):
            continue
        for cb in b:
            if _literal_equals(cb) and ca.field == cb.field and ca.value != cb.value:
                return True
    return False


def _literal_equals(cond: Condition) -> bool:
    return (
        cond.operator == Operator.EQUALS
        and cond.value_mode == ValueMode.VALUE
        and bool(cond.field)
        and bool(cond.value)
    )


def detect_rule_conflicts(
    rules: Sequence[LogicRule],
    label_for: LabelLookup,
    cross_rule: bool = False,
    category_label_for: LabelLookup | None = None,
) -> dict[int, list[str]]:
    """Map of rule index to its warnings; rules without warnings are absent."""
    category_label_for = category_label_for or _default_category_label
    warnings: dict[int, list[str]] = {}

    def add(index: int, message: str) -> None:
        warnings.setdefault(index, []).append(message)

    for i, rule in enumerate(rules):
        for message in detect_contradictions(rule.actions, label_for, category_label_for):
            add(i, message)

    if not cross_rule:
        return warnings

    for i in range(len(rules)):
        for j in range(i + 1, len(rules)):
            if conditions_mutually_exclusive(rules[i].conditions, rules[j].conditions):
                continue
            for a in rules[i].actions:
                for b in rules[j].actions:
                    key = _target_key(a)
                    if key is None or key != _target_key(b):
                        continue
                    message = _cross_conflict(a, b, _label(a, label_for, category_label_for))
                    if message:
                        add(i, f"{message} (Rule #{j + 1})")
                        add(j, f"{message} (Rule #{i + 1})")
    return warnings


def _cross_conflict(a: Action, b: Action, label: str) -> str | None:
    effect_a, effect_b = Effect(a.effect), Effect(b.effect)
    effects = {effect_a, effect_b}
    for positive, negative in _OPPOSITES:
        if effects == {positive, negative}:
            return _conflict_message(label, positive, negative)

    if not (isinstance(a, InputAction) and isinstance(b, InputAction)):
        return None
    if effect_a not in VALUE_EFFECTS or effect_b not in VALUE_EFFECTS:
        return None
    if effect_a != effect_b:
        return f'{label}: set via "{effect_a.value}" and "{effect_b.value}" simultaneously'
    if effect_a == Effect.VALUE and (a.value_text or "") != (b.value_text or ""):
        return f'{label}: value "{a.value_text or "(empty)"}" contradicts "{b.value_text or "(empty)"}"'
    if effect_a == Effect.FIELD and (a.value_field or "") != (b.value_field or ""):
        return f"{label}: set to different field references"
    if effect_a == Effect.EXPRESSION and (a.value_expression or "") != (b.value_expression or ""):
        return f"{label}: set to different expressions"
    return None


def has_conflicts(warnings: dict[int, list[str]]) -> bool:
    return any(warnings.values())
