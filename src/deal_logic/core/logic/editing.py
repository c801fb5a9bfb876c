"""
Rule set editing operations.

Each function takes the current list of rules and returns a new list;
inputs are never mutated. Indexes that do not exist leave the rules as
they were.
"""

from __future__ import annotations

from typing import Any

from deal_logic.core.ir.fields import FieldCatalog
from deal_logic.core.ir.rules import (
    TOGGLE_EFFECTS,
    VALUE_EFFECTS,
    Action,
    Combinator,
    Condition,
    Effect,
    InputAction,
    LogicRule,
    RuleKind,
    TaskAction,
    ValueMode,
)
from deal_logic.core.logic.operators import is_valueless, operators_for_type

Rules = list[LogicRule]


def default_condition() -> Condition:
    return Condition(field="", operator="", value="", value_mode=ValueMode.VALUE)


def default_action(kind: RuleKind, scope: str | int | None = None) -> Action:
    """A "visible" action, aimed at the scoped target when there is one."""
    model = kind.action_model
    data: dict[str, Any] = {"effect": Effect.VISIBLE, "value_visible": True}
    if scope is not None:
        data["target"] = scope
    return model.model_validate(data)


def _revalidate(model: Any, changes: dict[str, Any]) -> Any:
    """Copy a model with ``changes`` applied, running validation again."""
    return type(model).model_validate({**model.model_dump(), **changes})


def _replace_rule(rules: Rules, index: int, rule: LogicRule) -> Rules:
    return [rule if i == index else r for i, r in enumerate(rules)]


def _in_range(items: list, index: int) -> bool:
    return 0 <= index < len(items)


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


def add_rule(rules: Rules, kind: RuleKind, scope: str | int | None = None) -> Rules:
    """Append an AND rule with one blank condition and one default action."""
    rule = LogicRule[kind.action_model](
        combinator=Combinator.AND,
        conditions=[default_condition()],
        actions=[default_action(kind, scope)],
    )
    return [*rules, rule]


def remove_rule(rules: Rules, index: int) -> Rules:
    return [r for i, r in enumerate(rules) if i != index]


def set_combinator(rules: Rules, index: int, combinator: Combinator | str) -> Rules:
    if not _in_range(rules, index):
        return list(rules)
    rule = rules[index].model_copy(update={"combinator": Combinator(combinator)})
    return _replace_rule(rules, index, rule)


# ---------------------------------------------------------------------------
# Conditions
# ---------------------------------------------------------------------------


def _map_condition(rules: Rules, rule_index: int, cond_index: int, fn) -> Rules:
    if not _in_range(rules, rule_index) or not _in_range(rules[rule_index].conditions, cond_index):
        return list(rules)
    rule = rules[rule_index]
    conditions = list(rule.conditions)
    conditions[cond_index] = fn(conditions[cond_index])
    return _replace_rule(rules, rule_index, rule.model_copy(update={"conditions": conditions}))


def add_condition(rules: Rules, rule_index: int) -> Rules:
    if not _in_range(rules, rule_index):
        return list(rules)
    rule = rules[rule_index]
    conditions = [*rule.conditions, default_condition()]
    return _replace_rule(rules, rule_index, rule.model_copy(update={"conditions": conditions}))


def remove_condition(rules: Rules, rule_index: int, cond_index: int) -> Rules:
    if not _in_range(rules, rule_index):
        return list(rules)
    rule = rules[rule_index]
    conditions = [c for i, c in enumerate(rule.conditions) if i != cond_index]
    return _replace_rule(rules, rule_index, rule.model_copy(update={"conditions": conditions}))


def update_condition(rules: Rules, rule_index: int, cond_index: int, **changes: Any) -> Rules:
    """Set plain condition attributes (``value``, ``value_field``, ...)."""
    return _map_condition(rules, rule_index, cond_index, lambda c: _revalidate(c, changes))


def set_condition_field(
    rules: Rules,
    rule_index: int,
    cond_index: int,
    field_id: str,
    catalog: FieldCatalog | None = None,
) -> Rules:
    """Point a condition at another field.

    With a catalog, an operator the new field's type does not offer is
    cleared, along with its value.
    """

    def apply(cond: Condition) -> Condition:
        changes: dict[str, Any] = {"field": field_id}
        if catalog is not None and cond.operator:
            allowed = operators_for_type(catalog.type_of(field_id))
            if cond.operator not in allowed:
                changes.update(operator="", value="", value_field=None, value_expression=None)
        return _revalidate(cond, changes)

    return _map_condition(rules, rule_index, cond_index, apply)


def set_condition_operator(rules: Rules, rule_index: int, cond_index: int, operator: str) -> Rules:
    """Change the operator; valueless operators clear every value slot."""

    def apply(cond: Condition) -> Condition:
        changes: dict[str, Any] = {"operator": str(operator)}
        if is_valueless(operator):
            changes.update(value="", value_field=None, value_expression=None)
        return _revalidate(cond, changes)

    return _map_condition(rules, rule_index, cond_index, apply)


def set_condition_value_mode(
    rules: Rules, rule_index: int, cond_index: int, mode: ValueMode | str
) -> Rules:
    """Switch literal / field / expression; the inactive slots are cleared."""
    mode = ValueMode(mode)

    def apply(cond: Condition) -> Condition:
        return _revalidate(
            cond,
            {
                "value_mode": mode,
                "value": cond.value if mode == ValueMode.VALUE else "",
                "value_field": (cond.value_field or "") if mode == ValueMode.FIELD else None,
                "value_expression": (cond.value_expression or "")
                if mode == ValueMode.EXPRESSION
                else None,
            },
        )

    return _map_condition(rules, rule_index, cond_index, apply)


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


def _map_action(rules: Rules, rule_index: int, action_index: int, fn) -> Rules:
    if not _in_range(rules, rule_index) or not _in_range(rules[rule_index].actions, action_index):
        return list(rules)
    rule = rules[rule_index]
    actions = list(rule.actions)
    actions[action_index] = fn(actions[action_index])
    return _replace_rule(rules, rule_index, rule.model_copy(update={"actions": actions}))


def add_action(rules: Rules, rule_index: int, kind: RuleKind, scope: str | int | None = None) -> Rules:
    if not _in_range(rules, rule_index):
        return list(rules)
    rule = rules[rule_index]
    actions = [*rule.actions, default_action(kind, scope)]
    return _replace_rule(rules, rule_index, rule.model_copy(update={"actions": actions}))


def remove_action(rules: Rules, rule_index: int, action_index: int) -> Rules:
    if not _in_range(rules, rule_index):
        return list(rules)
    rule = rules[rule_index]
    actions = [a for i, a in enumerate(rule.actions) if i != action_index]
    return _replace_rule(rules, rule_index, rule.model_copy(update={"actions": actions}))


def update_action(rules: Rules, rule_index: int, action_index: int, **changes: Any) -> Rules:
    """Set plain action attributes (``target``, ``value_text``, ...).

    Task requirement extras only stick while the effect is ``required``.
    """

    def apply(action: Action) -> Action:
        if not isinstance(action, InputAction) and changes.get("effect") in VALUE_EFFECTS:
            return action
        updated = _revalidate(action, changes)
        if isinstance(updated, TaskAction) and updated.effect != Effect.REQUIRED:
            updated = updated.model_copy(update={"required_status_id": None, "required_for_stage_id": None})
        return updated

    return _map_action(rules, rule_index, action_index, apply)


def set_action_effect(rules: Rules, rule_index: int, action_index: int, effect: Effect | str) -> Rules:
    """Change what an action does, resetting the extras of the old effect.

    Document and task actions only toggle; a value effect leaves them as they are.
    """
    effect = Effect(effect)

    def apply(action: Action) -> Action:
        if not isinstance(action, InputAction) and effect not in TOGGLE_EFFECTS:
            return action
        changes: dict[str, Any] = {
            "effect": effect,
            "value_visible": None,
            "value_required": None,
        }
        if effect == Effect.VISIBLE:
            changes["value_visible"] = True
        elif effect == Effect.NOT_VISIBLE:
            changes["value_visible"] = False
        elif effect == Effect.REQUIRED:
            changes["value_required"] = True
        elif effect == Effect.NOT_REQUIRED:
            changes["value_required"] = False

        if isinstance(action, TaskAction):
            changes.update(required_status_id=None, required_for_stage_id=None)
        if isinstance(action, InputAction):
            changes.update(
                value_text=(action.value_text or "") if effect == Effect.VALUE else None,
                value_field=(action.value_field or "") if effect == Effect.FIELD else None,
                value_expression=(action.value_expression or "")
                if effect == Effect.EXPRESSION
                else None,
            )
        return _revalidate(action, changes)

    return _map_action(rules, rule_index, action_index, apply)
