from dataclasses import replace

import pytest

from thememetrics.features import analyze_section
from thememetrics.models import Condition, Rule
from thememetrics.rules_engine import (
    SEVERITY_RANK,
    effort_score,
    generate_recommendations,
    impact_score,
)
from thememetrics.rules_registry import load_rule_tables

HERO_VIDEO = '<div class="hero">\n  <video autoplay muted src="{{ section.settings.video_url }}"></video>\n</div>'


def plain(name, **overrides):
    return replace(analyze_section(f"{name}.liquid", "<div>{{ section.settings.text }}</div>"), **overrides)


def rec_ids(recs):
    return [r.id for r in recs]


def assert_ordered(recs):
    for a, b in zip(recs, recs[1:]):
        assert SEVERITY_RANK[a.severity] <= SEVERITY_RANK[b.severity]
        if a.severity == b.severity:
            assert a.estimated_revenue_impact >= b.estimated_revenue_impact


def test_rule_tables_load_in_order():
    section_rules, theme_rules = load_rule_tables()
    assert len(section_rules) == 17
    assert len(theme_rules) == 3
    assert section_rules[0].id == "hero-video"
    assert {r.scope for r in section_rules} == {"section"}
    assert [r.id for r in theme_rules] == ["too-many-sections", "high-total-load-time", "no-above-fold-optimization"]


def test_hero_with_video_triggers_critical_recommendation():
    hero = analyze_section("sections/hero-banner.liquid", HERO_VIDEO)
    assert hero.section_type == "hero"
    assert hero.has_video

    recs = generate_recommendations([hero], monthly_revenue=10000)
    by_id = {r.id: r for r in recs}
    assert by_id["hero-video"].severity == "critical"
    assert by_id["hero-video"].estimated_revenue_impact == 180
    assert by_id["hero-video"].section_name == "hero-banner"
    assert "video-autoplay" not in by_id


def test_revenue_scales_impact():
    hero = analyze_section("hero.liquid", HERO_VIDEO)
    recs = generate_recommendations([hero], monthly_revenue=50000)
    assert {r.id: r for r in recs}["hero-video"].estimated_revenue_impact == 900


def test_default_revenue_comes_from_settings(monkeypatch):
    monkeypatch.setenv("THEMEMETRICS_DEFAULT_MONTHLY_REVENUE", "20000")
    hero = analyze_section("hero.liquid", HERO_VIDEO)
    recs = generate_recommendations([hero])
    assert {r.id: r for r in recs}["hero-video"].estimated_revenue_impact == 360


def test_fourteen_sections_trigger_too_many_sections():
    sections = [plain(f"block-{i:02d}") for i in range(14)]
    recs = generate_recommendations(sections, monthly_revenue=10000)
    theme_recs = [r for r in recs if r.id == "too-many-sections"]
    assert len(theme_recs) == 1
    assert theme_recs[0].severity == "warning"
    assert theme_recs[0].section_name is None


def test_twelve_sections_do_not_trigger_too_many_sections():
    sections = [plain(f"block-{i:02d}") for i in range(12)]
    assert "too-many-sections" not in rec_ids(generate_recommendations(sections, 10000))


def test_high_total_load_time():
    sections = [plain(f"block-{i}", estimated_load_time_ms=1800) for i in range(3)]
    assert "high-total-load-time" in rec_ids(generate_recommendations(sections, 10000))


def test_position_aware_lazy_loading_rule():
    sections = [plain(f"block-{i}", lines_of_code=40, has_lazy_loading=True) for i in range(4)]
    sections[1] = replace(sections[1], has_lazy_loading=False)
    sections[3] = replace(sections[3], has_lazy_loading=False)
    recs = [r for r in generate_recommendations(sections, 10000) if r.id == "missing-lazy-loading"]
    assert [r.section_name for r in recs] == ["block-3"]


def test_inverted_lazy_loading_theme_rule():
    sections = [
        plain("block-0", has_lazy_loading=True),
        plain("block-1", has_lazy_loading=True),
        plain("block-2", has_lazy_loading=False),
    ]
    assert "no-above-fold-optimization" in rec_ids(generate_recommendations(sections, 10000))
    assert generate_recommendations([], 10000) == []


def test_ordering_is_severity_then_impact():
    sections = [
        analyze_section("hero.liquid", HERO_VIDEO),
        plain("instagram-feed", section_type="instagram"),
        plain("testimonials", section_type="testimonials"),
        plain("block-3", lines_of_code=40, complexity_score=75, inline_styles=8, liquid_loops=5),
        plain("testimonials-2", section_type="testimonials"),
    ]
    recs = generate_recommendations(sections, 10000)
    assert len(recs) > 5
    assert_ordered(recs)


def test_ties_keep_evaluation_order():
    sections = [plain("block-0")] + [plain(f"instagram-{i}", section_type="instagram") for i in range(1, 4)]
    recs = [r for r in generate_recommendations(sections, 10000) if r.id == "instagram-embed"]
    assert [r.section_name for r in recs] == ["instagram-1", "instagram-2", "instagram-3"]


def test_unknown_check_never_fires():
    rule = Rule(id="custom", scope="section", conditions=(Condition(check="does_not_exist"),),
                type="performance", severity="info", title="t", description="d", fix="f",
                impact_multiplier=0.01, effort="low")
    assert generate_recommendations([plain("block-0")], 10000, rules=((rule,), ())) == []


def test_custom_rule_tables_are_used():
    rule = Rule(id="always-footer", scope="section",
                conditions=(Condition(check="type_is", params={"types": ["footer"]}),),
                type="ux", severity="warning", title="t", description="d", fix="f",
                impact_multiplier=0.02, effort="high")
    recs = generate_recommendations([analyze_section("footer.liquid", "")], 1000, rules=((rule,), ()))
    assert [(r.id, r.estimated_revenue_impact) for r in recs] == [("always-footer", 20)]


@pytest.mark.parametrize("effort,score", [("low", 20), ("medium", 50), ("high", 80)])
def test_effort_score(effort, score):
    assert effort_score(effort) == score


def test_impact_score():
    assert impact_score(0.025) == 100
    assert impact_score(0.003) == 12
    assert impact_score(0.05) == 100
