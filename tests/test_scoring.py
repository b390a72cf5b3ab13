from dataclasses import replace

import pytest

from thememetrics.features import analyze_section
from thememetrics.models import LabMetrics, ThemeContext
from thememetrics.scoring import (
    architecture_score,
    best_practices_score,
    calculate_theme_metrics_score,
    ecommerce_score,
    heuristic_health_score,
    liquid_quality_score,
    mobile_score,
    revenue_impact_score,
    score_label,
    score_metric,
    score_theme,
    section_load_score,
)

GOOD_LAB = LabMetrics(lcp=2000, cls=0.05, tbt=100, fcp=1000)


def section(name, content="<div>{{ section.settings.text }}</div>", **overrides):
    return replace(analyze_section(f"{name}.liquid", content), **overrides)


# ---- heuristic health score

def test_health_score_of_empty_batch_is_100():
    assert heuristic_health_score([]) == 100


def test_health_score_of_trivial_section_is_100():
    assert heuristic_health_score([section("footer", "")]) == 100


def test_hero_video_and_instagram_penalties():
    base = [section("hero"), section("block")]
    with_video = [replace(base[0], has_video=True), base[1]]
    with_instagram = base + [section("instagram-feed", has_lazy_loading=True)]
    assert heuristic_health_score(base) - heuristic_health_score(with_video) == 15
    assert heuristic_health_score(base) - heuristic_health_score(with_instagram) == 8


def test_below_the_fold_sections_without_lazy_loading():
    above = [section("a"), section("b")]
    below = [section("c"), section("d")]
    assert heuristic_health_score(above) - heuristic_health_score(above + below) == 4


def test_health_score_average_complexity_and_load():
    sections = [section("a", complexity_score=50, estimated_load_time_ms=1200) for _ in range(3)]
    # 100 - 15 (complexity) - 10 (3600ms total) - 2 (third section not lazy)
    assert heuristic_health_score(sections) == 73


# ---- core web vitals

@pytest.mark.parametrize("metric,value,score,status", [
    ("lcp", 2500, 100, "good"),
    ("lcp", 3250, 75, "warning"),
    ("lcp", 4000, 50, "warning"),
    ("lcp", 8000, 0, "poor"),
    ("lcp", 20000, 0, "poor"),
    ("tbt", 400, 75, "warning"),
    ("fcp", 1800, 100, "good"),
])
def test_metric_curves(metric, value, score, status):
    result = score_metric(metric, value)
    assert (result.score, result.status) == (score, status)


def test_missing_metric_is_neutral():
    result = score_metric("cls", None)
    assert (result.value, result.score, result.status) == (None, 50, "warning")


# ---- sub-scores

def test_section_load_penalties():
    first_video = section("hero", has_video=True)
    score, penalties = section_load_score([first_video])
    assert score == 85
    assert penalties[0].points == 15

    many = [section(f"s{i}", has_lazy_loading=True) for i in range(13)]
    score, penalties = section_load_score(many)
    assert score == 95
    assert penalties[-1].section == "Theme"


def test_external_script_penalty_is_capped():
    score, _ = section_load_score([section("a", external_scripts=7)])
    assert score == 90


def test_liquid_quality_averages_sections():
    clean = section("a")
    messy = section("b", lines_of_code=450, liquid_loops=4, complexity_score=75, liquid_assigns=25, inline_styles=9)
    score, issues = liquid_quality_score([clean, messy])
    # messy: 100 - 20 - 25 - 15 - 10 - 15 = 15; average of 100 and 15
    assert score == 58
    assert {i.severity for i in issues} == {"high", "medium", "low"}
    assert liquid_quality_score([]) == (100, [])


def test_best_practices():
    assert best_practices_score([]) == 55
    good = [section("a", has_lazy_loading=True, has_responsive_images=True, has_preload=True)]
    assert best_practices_score(good) == 100


def test_architecture_uses_theme_context_when_given():
    sections = [section("a")]
    assert architecture_score(sections, None) == 100
    assert architecture_score(sections, ThemeContext(snippets_count=1, has_translations=False)) == 75
    assert architecture_score(sections, ThemeContext(snippets_count=8, has_translations=True)) == 100
    crowded = [section(f"s{i}") for i in range(21)]
    assert architecture_score(crowded, None) == 85


def test_architecture_penalizes_many_sections_above_the_fold():
    sections = [section(f"s{i}") for i in range(6)]
    assert architecture_score(sections, ThemeContext(sections_above_fold=5)) == 90
    assert architecture_score(sections, ThemeContext(sections_above_fold=4)) == 100
    assert architecture_score(sections, None) == 100


def test_ecommerce_score():
    full = [
        section("hero", section_type="hero"),
        section("grid", section_type="product_grid"),
        section("reviews", section_type="testimonials"),
        section("newsletter", section_type="newsletter"),
    ]
    assert ecommerce_score(full) == 100
    assert ecommerce_score([]) == 70
    heavy_hero = [section("hero", section_type="hero", complexity_score=65)]
    assert ecommerce_score(heavy_hero) == 70


def test_mobile_score():
    assert mobile_score(None) == 70
    assert mobile_score(LabMetrics()) == 70
    assert mobile_score(LabMetrics(lcp=3500, tbt=300, cls=0.2)) == 57
    assert mobile_score(LabMetrics(lcp=2600)) == 90


def test_revenue_impact():
    assert revenue_impact_score(2000, 10000) == (100, 0)
    assert revenue_impact_score(3000, 10000) == (85, 700)
    assert revenue_impact_score(4000) == (70, 2100)
    assert revenue_impact_score(7000, 10000)[0] == 30


# ---- theme score

def test_score_theme_without_lab_metrics_is_estimated():
    sections = [section("hero", '<video src="a.mp4"></video>'), section("footer", "")]
    result = score_theme(sections)
    assert result.score_source == "thememetrics-estimated"
    assert result.overall == result.health_score == heuristic_health_score(sections)


def test_score_theme_with_lab_metrics_is_measured():
    sections = [section("hero"), section("footer", "")]
    result = score_theme(sections, GOOD_LAB)
    assert result.score_source == "thememetrics"
    assert result.overall == result.breakdown.overall
    assert result.breakdown.speed.details["lcp"].status == "good"


def test_partial_lab_metrics_still_count_as_measured():
    result = score_theme([section("hero")], LabMetrics(lcp=5000))
    assert result.score_source == "thememetrics"
    assert result.breakdown.speed.details["tbt"].score == 50


def test_empty_lab_metrics_fall_back_to_heuristics():
    assert score_theme([section("hero")], LabMetrics()).score_source == "thememetrics-estimated"


def test_every_score_is_in_range():
    worst = [
        section(f"s{i}", has_video=True, external_scripts=9, has_animations=True, complexity_score=100,
                lines_of_code=900, liquid_loops=20, liquid_assigns=40, inline_styles=30,
                estimated_load_time_ms=9000, section_type="instagram")
        for i in range(25)
    ]
    bad_lab = LabMetrics(lcp=30000, cls=3.0, tbt=9000, fcp=20000)
    breakdown = calculate_theme_metrics_score(bad_lab, worst, ThemeContext(0, False), 1)
    values = [
        breakdown.overall, breakdown.speed.score, breakdown.speed.core_web_vitals, breakdown.speed.section_load,
        breakdown.quality.score, breakdown.quality.liquid_quality, breakdown.quality.best_practices,
        breakdown.quality.architecture, breakdown.conversion.score, breakdown.conversion.ecommerce,
        breakdown.conversion.mobile, breakdown.conversion.revenue_impact, heuristic_health_score(worst),
    ]
    assert all(0 <= v <= 100 for v in values)
    assert heuristic_health_score(worst) == 0


def test_score_label():
    assert score_label(90) == "Excellent"
    assert score_label(75) == "Good"
    assert score_label(55) == "Needs improvement"
    assert score_label(10) == "Critical"
