"""
Score aggregation for a theme.

Two paths:
- heuristic_health_score(): computed from static section features only.
- calculate_theme_metrics_score(): the speed / quality / conversion breakdown,
  which folds in lab metrics when the caller has them.

score_theme() picks the path and records it in ThemeScore.score_source.
Missing signals never raise; they fall back to neutral values.
"""

from typing import Dict, List, Optional, Sequence, Tuple

from .models import (
    SCORE_SOURCE_HEURISTIC,
    SCORE_SOURCE_LAB,
    ConversionScore,
    LabMetrics,
    MetricScore,
    Penalty,
    QualityIssue,
    QualityScore,
    ScoreBreakdown,
    Section,
    SpeedScore,
    ThemeContext,
    ThemeScore,
)
from .preprocess import clamp_score, round_half_up

# (good threshold, warning threshold, poor span) per metric; see _curve()
CWV_CURVES: Dict[str, Tuple[float, float, float]] = {
    'lcp': (2500, 4000, 4000),
    'cls': (0.1, 0.25, 0.25),
    'fcp': (1800, 3000, 3000),
    'tbt': (200, 600, 1000),
}
CWV_WEIGHTS = {'lcp': 0.35, 'cls': 0.25, 'tbt': 0.25, 'fcp': 0.15}
MISSING_METRIC = (50, 'warning')

OVERALL_WEIGHTS = {'speed': 0.4, 'quality': 0.35, 'conversion': 0.25}

SOCIAL_NAME_MARKERS = ('instagram', 'social')
ABOVE_FOLD_SECTIONS = 3

REVENUE_BASELINE_MS = 2000
CONVERSION_LOSS_PER_SECOND = 0.07
DEFAULT_REVENUE_FOR_LOSS = 15000
DEFAULT_LOAD_TIME_MS = 3000
# (loss above, score), checked in order
REVENUE_SCORE_TIERS = ((0.21, 30), (0.14, 50), (0.07, 70), (0.0, 85))


# ---- Heuristic health score

def heuristic_health_score(sections: Sequence[Section]) -> int:
    if not sections:
        return 100

    score = 100.0
    avg_complexity = sum(s.complexity_score for s in sections) / len(sections)
    score -= avg_complexity * 0.3

    total_load = sum(s.estimated_load_time_ms for s in sections)
    if total_load > 5000: score -= 20
    elif total_load > 3000: score -= 10
    elif total_load > 2000: score -= 5

    if len(sections) > 15: score -= 15
    elif len(sections) > 12: score -= 10
    elif len(sections) > 10: score -= 5

    if any(s.section_type == 'hero' and s.has_video for s in sections):
        score -= 15

    # the first two sections are treated as above the fold
    score -= 2 * sum(1 for s in sections[2:] if not s.has_lazy_loading)
    score -= 8 * sum(1 for s in sections if s.section_type == 'instagram')

    return clamp_score(round_half_up(score))


# ---- Core Web Vitals

def _curve(value: float, good: float, warn: float, span: float) -> Tuple[int, str]:
    if value <= good:
        return 100, 'good'
    if value <= warn:
        return round_half_up(100 - (value - good) / (warn - good) * 50), 'warning'
    return round_half_up(max(0.0, 50 - (value - warn) / span * 50)), 'poor'


def score_metric(metric: str, value: Optional[float]) -> MetricScore:
    if value is None:
        score, status = MISSING_METRIC
    else:
        score, status = _curve(value, *CWV_CURVES[metric])
    return MetricScore(value=value, score=score, status=status)


def core_web_vitals_score(lab: Optional[LabMetrics]) -> Tuple[int, Dict[str, MetricScore]]:
    lab = lab or LabMetrics()
    details = {m: score_metric(m, getattr(lab, m)) for m in ('lcp', 'cls', 'fcp', 'tbt')}
    score = round_half_up(sum(details[m].score * w for m, w in CWV_WEIGHTS.items()))
    return score, details


# ---- Speed

def _is_social(section: Section) -> bool:
    name = section.name.lower()
    return section.section_type == 'instagram' or any(m in name for m in SOCIAL_NAME_MARKERS)


def section_load_score(sections: Sequence[Section]) -> Tuple[int, List[Penalty]]:
    score = 100
    penalties: List[Penalty] = []

    def penalize(section: str, reason: str, points: int):
        nonlocal score
        penalties.append(Penalty(section=section, reason=reason, points=points))
        score -= points

    for index, s in enumerate(sections):
        if s.has_video:
            if index == 0:
                penalize(s.name, 'Video in hero section (autoplay)', 15)
            else:
                penalize(s.name, 'Video without lazy loading', 8)
        if _is_social(s):
            penalize(s.name, 'External social media embed', 10)
        if index >= 2 and not s.has_lazy_loading:
            penalize(s.name, 'Missing lazy loading', 5)
        if s.external_scripts > 0:
            penalize(s.name, f'{s.external_scripts} external scripts', min(s.external_scripts * 3, 10))
        if s.has_animations and s.complexity_score > 50:
            penalize(s.name, 'Heavy animations', 5)

    if len(sections) > 15:
        penalize('Theme', f'Too many sections ({len(sections)})', 10)
    elif len(sections) > 12:
        penalize('Theme', f'Many sections ({len(sections)})', 5)

    return max(0, score), penalties


# ---- Quality

def liquid_quality_score(sections: Sequence[Section]) -> Tuple[int, List[QualityIssue]]:
    issues: List[QualityIssue] = []
    if not sections:
        return 100, issues

    total = 0
    for s in sections:
        score = 100

        if s.lines_of_code > 400:
            score -= 20
            issues.append(QualityIssue(s.name, f'Very long file ({s.lines_of_code} lines)', 'high'))
        elif s.lines_of_code > 200:
            score -= 10
            issues.append(QualityIssue(s.name, f'Long file ({s.lines_of_code} lines)', 'medium'))

        # nested loops are approximated by loop count plus high complexity
        if s.liquid_loops > 3 and s.complexity_score > 60:
            score -= 25
            issues.append(QualityIssue(s.name, 'Nested loops detected', 'high'))
        elif s.liquid_loops > 2:
            score -= 10
            issues.append(QualityIssue(s.name, f'Many loops ({s.liquid_loops})', 'medium'))

        if s.liquid_assigns > 20:
            score -= 15
            issues.append(QualityIssue(s.name, f'Too many assigns ({s.liquid_assigns})', 'medium'))
        elif s.liquid_assigns > 10:
            score -= 5

        if s.inline_styles > 5:
            score -= 10
            issues.append(QualityIssue(s.name, f'Many inline styles ({s.inline_styles})', 'low'))
        elif s.inline_styles > 0:
            score -= 3

        if s.complexity_score > 70:
            score -= 15
            issues.append(QualityIssue(s.name, 'High code complexity', 'high'))
        elif s.complexity_score > 50:
            score -= 8
            issues.append(QualityIssue(s.name, 'Medium code complexity', 'medium'))

        total += max(0, score)

    return round_half_up(total / len(sections)), issues


def best_practices_score(sections: Sequence[Section]) -> int:
    score = 100
    count = len(sections) or 1

    lazy_rate = sum(1 for s in sections if s.has_lazy_loading) / count
    if lazy_rate < 0.5: score -= 20
    elif lazy_rate < 0.7: score -= 10

    responsive_rate = sum(1 for s in sections if s.has_responsive_images) / count
    if responsive_rate < 0.3: score -= 15
    elif responsive_rate < 0.5: score -= 8

    if not any(s.has_preload for s in sections):
        score -= 10

    return max(0, score)


def architecture_score(sections: Sequence[Section], theme: Optional[ThemeContext]) -> int:
    score = 100

    if theme is not None:
        if theme.snippets_count is not None:
            if theme.snippets_count < 3: score -= 15
            elif theme.snippets_count >= 5: score += 5
        if theme.has_translations is False:
            score -= 10

    if len(sections) > 20: score -= 15
    elif len(sections) > 15: score -= 8

    above_fold = min(ABOVE_FOLD_SECTIONS, len(sections))
    if theme is not None and theme.sections_above_fold is not None:
        above_fold = theme.sections_above_fold
    if above_fold > 4:
        score -= 10

    return clamp_score(score)


# ---- Conversion

def _has_section(sections: Sequence[Section], section_type: str, name_marker: str) -> bool:
    return any(s.section_type == section_type or name_marker in s.name.lower() for s in sections)


def ecommerce_score(sections: Sequence[Section]) -> int:
    score = 70
    if _has_section(sections, 'hero', 'hero'): score += 10
    if _has_section(sections, 'product_grid', 'product'): score += 10
    if _has_section(sections, 'testimonials', 'review'): score += 5
    if _has_section(sections, 'newsletter', 'newsletter'): score += 5

    hero = next((s for s in sections if s.section_type == 'hero' or 'hero' in s.name.lower()), None)
    if hero is not None and hero.complexity_score > 60:
        score -= 10

    return clamp_score(score)


def mobile_score(lab: Optional[LabMetrics]) -> int:
    if lab is None or lab.is_empty():
        return 70

    score = 100
    if lab.lcp is not None:
        if lab.lcp > 3000: score -= 20
        elif lab.lcp > 2500: score -= 10
    if lab.tbt is not None:
        if lab.tbt > 400: score -= 15
        elif lab.tbt > 200: score -= 8
    if lab.cls is not None:
        if lab.cls > 0.15: score -= 15
        elif lab.cls > 0.1: score -= 8
    return max(0, score)


def revenue_impact_score(load_time_ms: float, monthly_revenue: Optional[float] = None) -> Tuple[int, int]:
    """7% conversion loss per second over a 2s baseline -> (score, estimated monthly loss)."""
    excess_seconds = max(0.0, load_time_ms - REVENUE_BASELINE_MS) / 1000
    loss = excess_seconds * CONVERSION_LOSS_PER_SECOND
    revenue = monthly_revenue or DEFAULT_REVENUE_FOR_LOSS
    monthly_loss = round_half_up(revenue * loss)

    score = 100
    for threshold, tier_score in REVENUE_SCORE_TIERS:
        if loss > threshold:
            score = tier_score
            break
    return score, monthly_loss


# ---- Breakdown

def calculate_theme_metrics_score(lab: Optional[LabMetrics], sections: Sequence[Section],
                                  theme: Optional[ThemeContext] = None,
                                  monthly_revenue: Optional[float] = None) -> ScoreBreakdown:
    cwv, details = core_web_vitals_score(lab)
    section_load, penalties = section_load_score(sections)
    speed = SpeedScore(
        score=round_half_up(cwv * 0.6 + section_load * 0.4),
        core_web_vitals=cwv,
        section_load=section_load,
        details=details,
        penalties=penalties,
    )

    liquid, quality_issues = liquid_quality_score(sections)
    practices = best_practices_score(sections)
    architecture = architecture_score(sections, theme)
    quality = QualityScore(
        score=round_half_up(liquid * 0.5 + practices * 0.3 + architecture * 0.2),
        liquid_quality=liquid,
        best_practices=practices,
        architecture=architecture,
        issues=quality_issues,
    )

    ecommerce = ecommerce_score(sections)
    mobile = mobile_score(lab)
    load_time = lab.lcp if lab is not None and lab.lcp else DEFAULT_LOAD_TIME_MS
    revenue, monthly_loss = revenue_impact_score(load_time, monthly_revenue)
    conversion = ConversionScore(
        score=round_half_up(ecommerce * 0.5 + mobile * 0.3 + revenue * 0.2),
        ecommerce=ecommerce,
        mobile=mobile,
        revenue_impact=revenue,
        estimated_monthly_loss=monthly_loss,
    )

    overall = round_half_up(
        speed.score * OVERALL_WEIGHTS['speed']
        + quality.score * OVERALL_WEIGHTS['quality']
        + conversion.score * OVERALL_WEIGHTS['conversion']
    )
    return ScoreBreakdown(overall=clamp_score(overall), speed=speed, quality=quality, conversion=conversion)


def score_theme(sections: Sequence[Section], lab: Optional[LabMetrics] = None,
                theme: Optional[ThemeContext] = None,
                monthly_revenue: Optional[float] = None) -> ThemeScore:
    health = heuristic_health_score(sections)
    breakdown = calculate_theme_metrics_score(lab, sections, theme, monthly_revenue)
    measured = lab is not None and not lab.is_empty()
    return ThemeScore(
        overall=breakdown.overall if measured else health,
        score_source=SCORE_SOURCE_LAB if measured else SCORE_SOURCE_HEURISTIC,
        health_score=health,
        breakdown=breakdown,
    )


def score_label(score: int) -> str:
    if score >= 90: return 'Excellent'
    if score >= 70: return 'Good'
    if score >= 50: return 'Needs improvement'
    return 'Critical'
