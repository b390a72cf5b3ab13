import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from .models import EFFORTS, RECOMMENDATION_TYPES, SEVERITIES, Condition, Rule

logger = logging.getLogger(__name__)

DEFAULT_RULES_PATH = Path(__file__).parent / "data" / "recommendations.yaml"


class RuleTableError(ValueError):
    """The rule YAML is missing, unreadable or malformed."""


def _safe_load(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise RuleTableError(f"rule table not found: {path}")
    doc = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(doc, dict):
        raise RuleTableError(f"{path}: expected a mapping with section_rules/theme_rules")
    return doc


def _as_condition(raw: Any, rule_id: str) -> Condition:
    if isinstance(raw, str):
        return Condition(check=raw)
    if not isinstance(raw, dict) or "check" not in raw:
        raise RuleTableError(f"{rule_id}: every condition needs a 'check'")
    return Condition(check=raw["check"], params=dict(raw.get("params") or {}))


def _as_rule(r: Dict[str, Any], scope: str) -> Rule:
    rule_id = r.get("id") or "<unnamed>"
    severity = r.get("severity", "info")
    effort = r.get("effort", "medium")
    rtype = r.get("type", "performance")
    if severity not in SEVERITIES:
        raise RuleTableError(f"{rule_id}: unknown severity {severity!r}")
    if effort not in EFFORTS:
        raise RuleTableError(f"{rule_id}: unknown effort {effort!r}")
    if rtype not in RECOMMENDATION_TYPES:
        raise RuleTableError(f"{rule_id}: unknown type {rtype!r}")
    return Rule(
        id=rule_id,
        scope=scope,
        conditions=tuple(_as_condition(c, rule_id) for c in r.get("when") or []),
        type=rtype,
        severity=severity,
        title=str(r.get("title", "")).strip(),
        description=str(r.get("description", "")).strip(),
        fix=str(r.get("fix", "")).strip(),
        impact_multiplier=float(r.get("impact_multiplier", 0.0)),
        effort=effort,
    )


@lru_cache(maxsize=None)
def load_rule_tables(path: Optional[str] = None) -> Tuple[Tuple[Rule, ...], Tuple[Rule, ...]]:
    """
    Load (section_rules, theme_rules) once per path.

    The packaged recommendations.yaml is used unless a path is given.
    Tuples keep table order, which is the emission order of recommendations.
    """
    source = Path(path) if path else DEFAULT_RULES_PATH
    doc = _safe_load(source)
    section_rules = tuple(_as_rule(r, "section") for r in doc.get("section_rules") or [])
    theme_rules = tuple(_as_rule(r, "theme") for r in doc.get("theme_rules") or [])
    logger.debug("loaded %d section rules and %d theme rules from %s",
                 len(section_rules), len(theme_rules), source)
    return section_rules, theme_rules
