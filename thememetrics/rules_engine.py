import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .config import get_settings
from .features import benchmark_for
from .models import Recommendation, Rule, Section
from .preprocess import round_half_up
from .rules_registry import load_rule_tables

logger = logging.getLogger(__name__)

SEVERITY_RANK = {"critical": 0, "warning": 1, "info": 2}
EFFORT_SCORES = {"low": 20, "medium": 50, "high": 80}

# ---- Section checks: (section, index, sections, params) -> bool
SectionCheck = Callable[[Section, int, Sequence[Section], Dict[str, Any]], bool]


def check_type_is(section: Section, _index: int, _sections, params: Dict[str, Any]) -> bool:
    return section.section_type in (params.get("types") or [])


def check_type_is_not(section: Section, _index: int, _sections, params: Dict[str, Any]) -> bool:
    return section.section_type not in (params.get("types") or [])


def check_flag(section: Section, _index: int, _sections, params: Dict[str, Any]) -> bool:
    return bool(getattr(section, params["name"])) == bool(params.get("value", True))


def check_field_above(section: Section, _index: int, _sections, params: Dict[str, Any]) -> bool:
    return getattr(section, params["field"]) > params["value"]


def check_position_after(_section: Section, index: int, _sections, params: Dict[str, Any]) -> bool:
    """True when the section comes after the given 0-based position."""
    return index > int(params.get("index", 0))


def check_load_time_above_benchmark(section: Section, _index: int, _sections, _params: Dict[str, Any]) -> bool:
    return section.estimated_load_time_ms > benchmark_for(section.section_type)["max_recommended"]


SECTION_CHECKS: Dict[str, SectionCheck] = {
    "type_is": check_type_is,
    "type_is_not": check_type_is_not,
    "flag": check_flag,
    "field_above": check_field_above,
    "position_after": check_position_after,
    "load_time_above_benchmark": check_load_time_above_benchmark,
}

# ---- Theme checks: (sections, params) -> bool
ThemeCheck = Callable[[Sequence[Section], Dict[str, Any]], bool]


def check_section_count_above(sections: Sequence[Section], params: Dict[str, Any]) -> bool:
    return len(sections) > params["value"]


def check_total_load_time_above(sections: Sequence[Section], params: Dict[str, Any]) -> bool:
    return sum(s.estimated_load_time_ms for s in sections) > params["value"]


def check_lazy_loading_inverted(sections: Sequence[Section], params: Dict[str, Any]) -> bool:
    """Above-the-fold sections are all lazy while everything below loads eagerly."""
    if not sections:
        return False
    above_fold = int(params.get("above_fold", 2))
    return (all(s.has_lazy_loading for s in sections[:above_fold])
            and not any(s.has_lazy_loading for s in sections[above_fold:]))


THEME_CHECKS: Dict[str, ThemeCheck] = {
    "section_count_above": check_section_count_above,
    "total_load_time_above": check_total_load_time_above,
    "lazy_loading_inverted": check_lazy_loading_inverted,
}

CHECKS: Dict[str, Dict[str, Callable[..., bool]]] = {
    "section": SECTION_CHECKS,
    "theme": THEME_CHECKS,
}


def _resolve(rule: Rule, check: str) -> Optional[Callable[..., bool]]:
    fn = CHECKS[rule.scope].get(check)
    if fn is None:
        logger.warning("rule %s: unknown %s check %r, rule skipped", rule.id, rule.scope, check)
    return fn


def _section_rule_holds(rule: Rule, section: Section, index: int, sections: Sequence[Section]) -> bool:
    for cond in rule.conditions:
        fn = _resolve(rule, cond.check)
        if fn is None or not fn(section, index, sections, cond.params):
            return False
    return True


def _theme_rule_holds(rule: Rule, sections: Sequence[Section]) -> bool:
    for cond in rule.conditions:
        fn = _resolve(rule, cond.check)
        if fn is None or not fn(sections, cond.params):
            return False
    return True


def _bind(rule: Rule, monthly_revenue: float, section_name: Optional[str] = None) -> Recommendation:
    return Recommendation(
        id=rule.id,
        type=rule.type,
        severity=rule.severity,
        title=rule.title,
        description=rule.description,
        fix=rule.fix,
        effort=rule.effort,
        estimated_revenue_impact=round_half_up(monthly_revenue * rule.impact_multiplier),
        section_name=section_name,
    )


def _rule_tables(rules: Optional[Tuple[Tuple[Rule, ...], Tuple[Rule, ...]]]):
    return rules if rules is not None else load_rule_tables(get_settings().rules_path)


def evaluate_section_rules(sections: Sequence[Section], monthly_revenue: float,
                           rules: Optional[Tuple[Rule, ...]] = None) -> List[Recommendation]:
    section_rules = rules if rules is not None else _rule_tables(None)[0]
    out: List[Recommendation] = []
    for index, section in enumerate(sections):
        for rule in section_rules:
            if _section_rule_holds(rule, section, index, sections):
                out.append(_bind(rule, monthly_revenue, section.name))
    return out


def evaluate_theme_rules(sections: Sequence[Section], monthly_revenue: float,
                         rules: Optional[Tuple[Rule, ...]] = None) -> List[Recommendation]:
    theme_rules = rules if rules is not None else _rule_tables(None)[1]
    return [_bind(rule, monthly_revenue) for rule in theme_rules if _theme_rule_holds(rule, sections)]


def sort_recommendations(recs: List[Recommendation]) -> List[Recommendation]:
    # sorted() is stable: equal keys keep evaluation order
    return sorted(recs, key=lambda r: (SEVERITY_RANK[r.severity], -r.estimated_revenue_impact))


def generate_recommendations(sections: Sequence[Section], monthly_revenue: Optional[float] = None,
                             rules: Optional[Tuple[Tuple[Rule, ...], Tuple[Rule, ...]]] = None
                             ) -> List[Recommendation]:
    """
    Evaluate every section rule against every section (table order), then every
    theme rule, and return the matches ordered by severity then revenue impact.
    """
    if monthly_revenue is None:
        monthly_revenue = get_settings().default_monthly_revenue
    section_rules, theme_rules = _rule_tables(rules)

    recs = evaluate_section_rules(sections, monthly_revenue, section_rules)
    recs.extend(evaluate_theme_rules(sections, monthly_revenue, theme_rules))
    logger.debug("%d recommendation(s) for %d section(s)", len(recs), len(sections))
    return sort_recommendations(recs)


def effort_score(effort: str) -> int:
    return EFFORT_SCORES[effort]


def impact_score(impact_multiplier: float) -> int:
    """Map a revenue multiplier to 0-100 (0.025 -> 100, 0.003 -> 12)."""
    return min(100, round_half_up(impact_multiplier * 4000))
