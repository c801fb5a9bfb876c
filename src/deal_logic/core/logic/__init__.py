"""
Conditional logic rules: operator catalog, rule set editing,
contradiction detection and save payloads.
"""

from deal_logic.core.logic.contradictions import (
    conditions_mutually_exclusive,
    detect_contradictions,
    detect_rule_conflicts,
)
from deal_logic.core.logic.operators import (
    VALUELESS_OPERATORS,
    is_valueless,
    operator_label,
    operators_for_type,
)
from deal_logic.core.logic.payload import (
    check_expressions,
    dump_rule_set,
    load_rule_set,
    prepare_save,
)

__all__ = [
    "VALUELESS_OPERATORS",
    "check_expressions",
    "conditions_mutually_exclusive",
    "detect_contradictions",
    "detect_rule_conflicts",
    "dump_rule_set",
    "is_valueless",
    "load_rule_set",
    "operator_label",
    "operators_for_type",
    "prepare_save",
]
