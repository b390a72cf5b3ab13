from dataclasses import replace

import pytest

from thememetrics.features import (
    analyze_section,
    calculate_complexity_score,
    count_problematic_sections,
    estimate_load_time,
    get_section_status,
)
from thememetrics.preprocess import line_number, round_half_up, section_name, split_lines


def test_empty_footer_is_minimal_but_well_formed():
    s = analyze_section("footer.liquid", "")
    assert s.name == "footer"
    assert s.section_type == "footer"
    assert s.lines_of_code == 1
    assert s.complexity_score == 0
    assert s.estimated_load_time_ms == 100
    assert not any([s.has_video, s.has_animations, s.has_lazy_loading, s.has_responsive_images, s.has_preload])


def test_thirteen_loops_over_four_hundred_lines():
    lines = ["{% for item in collection.products %}{{ item.title }}{% endfor %}"] * 13
    lines += ["<p>filler</p>"] * (400 - len(lines))
    s = analyze_section("sections/big.liquid", "\n".join(lines))
    assert s.lines_of_code == 400
    assert s.liquid_loops == 13
    assert s.complexity_score >= 55


@pytest.mark.parametrize("count,points", [(50, 0), (51, 5), (101, 10), (201, 30), (800, 30)])
def test_line_count_tiers(count, points):
    assert calculate_complexity_score("\n".join(["<p>x</p>"] * count)) == points


def test_script_contribution_is_capped():
    content = "\n".join(["<script></script>"] * 10)
    assert calculate_complexity_score(content) == 20


def test_complexity_is_clamped_to_100():
    heavy = "\n".join(
        ["{% for a in b %}{% if c %}{% assign d = 1 %}{% capture e %}{% endcapture %}<script></script>"] * 600
        + ["video iframe instagram animation transition backdrop-filter"]
    )
    assert calculate_complexity_score(heavy) == 100


def test_load_time_counts_images():
    assert estimate_load_time('<img src="a.jpg">', 0) == 200


def test_external_script_counter():
    s = analyze_section("custom.liquid", '<script src="https://cdn.example.com/a.js"></script>')
    assert s.external_scripts == 1


@pytest.mark.parametrize("content,flag", [
    ('<img loading="lazy" src="a.jpg">', "has_lazy_loading"),
    ("<img data-src='a.jpg'>", "has_lazy_loading"),
    ('{{ image | image_url: width: 800 | image_tag: widths: "400, 800" }}', "has_responsive_images"),
    ('<link rel="preload" as="image">', "has_preload"),
    ('<img fetchpriority="high">', "has_preload"),
    ("<iframe src='https://www.youtube.com/embed/x'></iframe>", "has_video"),
    (".fade { transition: opacity .2s; }", "has_animations"),
])
def test_feature_flags(content, flag):
    assert getattr(analyze_section("custom.liquid", content), flag) is True


def test_inline_styles_ignore_empty_attributes():
    s = analyze_section("custom.liquid", '<div style="color:red"></div><div style=""></div>')
    assert s.inline_styles == 1


@pytest.mark.parametrize("load,status", [(800, "optimal"), (1000, "warning"), (1300, "critical")])
def test_section_status_uses_type_benchmark(load, status):
    hero = replace(analyze_section("hero.liquid", ""), estimated_load_time_ms=load)
    assert get_section_status(hero) == status


def test_count_problematic_sections():
    fine = analyze_section("footer.liquid", "")
    slow = replace(fine, estimated_load_time_ms=5000)
    complex_ = replace(fine, complexity_score=61)
    assert count_problematic_sections([fine, slow, complex_]) == 2


def test_section_name_normalization():
    assert section_name("sections/main-product.liquid") == "main-product"
    assert section_name("footer.liquid") == "footer"
    assert section_name("footer") == "footer"


def test_line_number_is_one_indexed():
    code = "a\nb\nc"
    assert line_number(code, 0, split_lines(code)) == 1
    assert line_number(code, code.index("c"), split_lines(code)) == 3


def test_round_half_up_differs_from_bankers_rounding():
    assert round_half_up(2.5) == 3
    assert round_half_up(0.5) == 1
    assert round_half_up(-0.5) == 0
