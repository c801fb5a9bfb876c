"""
Rule set payloads for the persistence layer.

Saving replaces every rule in scope (delete then re-insert), so the
payload always carries the full ordered rule list, plus the scope target
id when the builder was opened for a single input, document type or task
template.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from deal_logic.core.config import Settings
from deal_logic.core.errors import (
    ExpressionValidationError,
    RuleConflictError,
    RulePayloadError,
)
from deal_logic.core.expression_lang.validator import validate
from deal_logic.core.ir.rules import (
    Effect,
    InputAction,
    LogicRule,
    RuleKind,
    RuleSet,
    TargetType,
    ValueMode,
)
from deal_logic.core.logic.contradictions import LabelLookup, detect_rule_conflicts

logger = logging.getLogger(__name__)

ExpressionErrors = dict[tuple[int, str, int], str]

# Keys the read endpoint fills in when a stored row leaves them empty
_EFFECT_KEYS = {
    RuleKind.INPUT: "value_type",
    RuleKind.DOCUMENT: "value_type",
    RuleKind.TASK: "action_type",
}
_DEFAULT_EFFECTS = {
    RuleKind.INPUT: Effect.VALUE,
    RuleKind.DOCUMENT: Effect.VISIBLE,
    RuleKind.TASK: Effect.VISIBLE,
}
_TARGET_KEYS: dict[RuleKind, tuple[str, str | int]] = {
    RuleKind.INPUT: ("input_id", ""),
    RuleKind.DOCUMENT: ("document_type_id", 0),
    RuleKind.TASK: ("target_task_template_id", 0),
}


def _normalize_action(action: dict[str, Any], kind: RuleKind) -> dict[str, Any]:
    effect_key = _EFFECT_KEYS[kind]
    target_key, empty_target = _TARGET_KEYS[kind]
    action = {
        **action,
        effect_key: action.get(effect_key) or _DEFAULT_EFFECTS[kind].value,
        target_key: empty_target if action.get(target_key) is None else action[target_key],
    }
    if kind == RuleKind.INPUT and not action.get("target_type"):
        category = action.get("category_id") is not None and not action[target_key]
        action["target_type"] = (TargetType.CATEGORY if category else TargetType.INPUT).value
    return action


def _normalize_rule(raw: Any, kind: RuleKind) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise RulePayloadError(f"rule must be an object, got {type(raw).__name__}")
    conditions = []
    for cond in raw.get("conditions") or []:
        if isinstance(cond, dict):
            cond = {
                **cond,
                "field": cond.get("field") or "",
                "operator": cond.get("operator") or "",
                "value_type": cond.get("value_type") or ValueMode.VALUE.value,
            }
        conditions.append(cond)
    actions = [
        _normalize_action(action, kind) if isinstance(action, dict) else action
        for action in raw.get("actions") or []
    ]
    return {"type": raw.get("type") or "AND", "conditions": conditions, "actions": actions}


def load_rule_set(payload: Any, kind: RuleKind | str) -> RuleSet:
    """Parse a stored ``{"rules": [...], <scope key>?: id}`` payload.

    Raises:
        RulePayloadError: If the payload shape or a rule is invalid.
    """
    kind = RuleKind(kind)
    if not isinstance(payload, dict):
        raise RulePayloadError(f"payload must be an object, got {type(payload).__name__}")
    raw_rules = payload.get("rules", [])
    if not isinstance(raw_rules, list):
        raise RulePayloadError("rules must be an array")

    rule_model = LogicRule[kind.action_model]
    rules = []
    for index, raw in enumerate(raw_rules):
        try:
            rules.append(rule_model.model_validate(_normalize_rule(raw, kind)))
        except ValidationError as e:
            raise RulePayloadError(f"Rule #{index + 1} is invalid: {e}") from e

    scope = payload.get(kind.scope_key)
    logger.debug(f"Loaded {len(rules)} {kind.value} rule(s), scope={scope!r}")
    return RuleSet(kind=kind, rules=rules, scope=scope)


def dump_rule_set(rule_set: RuleSet) -> dict[str, Any]:
    """Persistence payload for a rule set, using the stored column names."""
    payload: dict[str, Any] = {
        "rules": [
            rule.model_dump(mode="json", by_alias=True, exclude_none=True) for rule in rule_set.rules
        ]
    }
    if rule_set.scope is not None:
        payload[rule_set.kind.scope_key] = rule_set.scope
    return payload


def check_expressions(rules: list[LogicRule]) -> ExpressionErrors:
    """Validator errors for every expression-mode condition and action value."""
    errors: ExpressionErrors = {}
    for ri, rule in enumerate(rules):
        for ci, cond in enumerate(rule.conditions):
            if cond.value_mode == ValueMode.EXPRESSION:
                result = validate(cond.value_expression or "")
                if not result.valid:
                    errors[(ri, "conditions", ci)] = result.error or ""
        for ai, action in enumerate(rule.actions):
            if isinstance(action, InputAction) and action.effect == Effect.EXPRESSION:
                result = validate(action.value_expression or "")
                if not result.valid:
                    errors[(ri, "actions", ai)] = result.error or ""
    return errors


def prepare_save(
    rule_set: RuleSet,
    label_for: LabelLookup,
    settings: Settings | None = None,
    category_label_for: LabelLookup | None = None,
) -> dict[str, Any]:
    """Gate a save and build its payload.

    Raises:
        RuleConflictError: If any rule has contradiction warnings.
        ExpressionValidationError: If formulas must be valid and some are not.
    """
    settings = settings or Settings()

    warnings = detect_rule_conflicts(
        rule_set.rules,
        label_for,
        cross_rule=settings.rules.cross_rule_conflicts,
        category_label_for=category_label_for,
    )
    if warnings:
        raise RuleConflictError(warnings)

    errors = check_expressions(rule_set.rules)
    if errors:
        if settings.expressions.require_valid:
            raise ExpressionValidationError(errors)
        for (ri, section, index), message in errors.items():
            logger.warning(f"Rule #{ri + 1} {section}[{index}]: {message}")

    payload = dump_rule_set(rule_set)
    logger.info(f"Saving {len(rule_set.rules)} {rule_set.kind.value} rule(s)")
    return payload
