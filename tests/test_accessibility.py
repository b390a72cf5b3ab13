from thememetrics.accessibility import (
    WCAG,
    accessibility_label,
    analyze_accessibility,
    calculate_accessibility_score,
    check_aria,
    check_buttons,
    check_focus_styles,
    check_forms,
    check_headings,
    check_images,
    check_interactive,
    check_links,
    check_navigation,
    generate_accessibility_report,
)
from thememetrics.models import Issue
from thememetrics.preprocess import split_lines


def run(detector, code, section="custom"):
    return detector(code, split_lines(code), section)


def ids(issues):
    return [i.id for i in issues]


# ---- images

def test_img_without_alt_is_critical_non_text_content():
    issues = run(check_images, '<div>\n<img src="{{ image | image_url }}">\n</div>')
    assert ids(issues) == ["img-no-alt-2"]
    issue = issues[0]
    assert issue.severity == "critical"
    assert issue.category == "images"
    assert issue.standard_reference == "1.1.1 Non-text Content"
    assert issue.line == 2


def test_adding_alt_clears_the_missing_alt_flag():
    issues = run(check_images, '<img src="a.jpg" alt="Model wearing the red summer dress">')
    assert "img-no-alt-1" not in ids(issues)


def test_alt_fix_depends_on_image_kind():
    icon = run(check_images, '<img class="icon-cart" src="cart.svg">')[0]
    product = run(check_images, '<img src="{{ product.featured_image | image_url }}">')[0]
    generic = run(check_images, '<img src="team.jpg">')[0]
    assert 'alt=""' in icon.fix
    assert "{{ product.title | escape }}" in product.fix
    assert "Describe the image here" in generic.fix


def test_empty_alt_on_informative_image_is_a_warning():
    issues = run(check_images, '<img class="hero-image" src="a.jpg" alt="">')
    assert ids(issues) == ["img-empty-alt-1"]
    assert issues[0].severity == "warning"


def test_filler_alt_text_is_info():
    issues = run(check_images, '<img src="a.jpg" alt="image">')
    assert ids(issues) == ["img-bad-alt-1"]
    assert issues[0].severity == "info"


def test_background_image_needs_text_alternative():
    flagged = run(check_images, '<div style="background-image: url(hero.jpg)"></div>')
    labelled = run(check_images, '<div role="img" aria-label="Spring" style="background-image: url(hero.jpg)"></div>')
    assert ids(flagged) == ["bg-img-no-alt-1"]
    assert labelled == []


def test_video_without_captions_is_critical():
    issues = run(check_images, '<video controls src="a.mp4"></video>')
    assert ids(issues) == ["video-no-captions-1"]
    assert issues[0].standard_reference == WCAG["CAPTIONS"]
    captioned = '<video controls src="a.mp4"><track kind="captions" src="a.vtt"></video>'
    assert run(check_images, captioned) == []


def test_bare_video_tag_is_checked_for_captions():
    code = '<video>\n <source src="{{ section.settings.video_url }}" type="video/mp4">\n</video>'
    assert "video-no-captions-1" in ids(analyze_accessibility("hero", code).issues)


def test_alt_attribute_is_matched_case_insensitively():
    assert run(check_images, '<img src="dress.jpg" ALT="Red summer dress">') == []


def test_data_alt_is_not_an_alt_attribute():
    issues = run(check_images, '<img src="dress.jpg" data-alt="Red summer dress">')
    assert ids(issues) == ["img-no-alt-1"]
    assert run(check_links, '<a href="/"><img src="logo.png" data-alt="Acme"></a>')[0].id == "link-empty-1"


# ---- links

def test_empty_link():
    issues = run(check_links, '<a href="/cart"><svg></svg></a>')
    assert ids(issues) == ["link-empty-1"]
    assert 'aria-label="Describe the link target"' in issues[0].fix


def test_link_with_image_alt_is_not_empty():
    assert run(check_links, '<a href="/"><img src="logo.png" alt="Acme"></a>') == []


def test_generic_link_text():
    issues = run(check_links, '<a href="/blog/post">Read more</a>')
    assert ids(issues) == ["link-generic-1"]
    assert issues[0].severity == "warning"


def test_new_tab_without_warning_is_info():
    issues = run(check_links, '<a href="https://example.com" target="_blank">Our partner</a>')
    assert ids(issues) == ["link-new-window-1"]
    ok = '<a href="https://example.com" target="_blank">Our partner (opens in new tab)</a>'
    assert run(check_links, ok) == []


# ---- buttons

def test_icon_button_gets_contextual_label():
    issues = run(check_buttons, '<button class="cart-toggle" type="button"><svg></svg></button>')
    assert ids(issues) == ["button-empty-1"]
    assert 'aria-label="Open cart"' in issues[0].fix


def test_button_with_text_or_label_passes():
    assert run(check_buttons, '<button type="submit">Subscribe</button>') == []
    assert run(check_buttons, '<button type="button" aria-label="Close"></button>') == []


def test_clickable_div_is_a_fake_button():
    issues = run(check_buttons, '<div class="card" onclick="openModal()">Open</div>')
    assert ids(issues) == ["fake-button-1"]
    assert issues[0].standard_reference == WCAG["KEYBOARD"]
    assert run(check_buttons, '<div onclick="go()" role="button" tabindex="0">Go</div>') == []


# ---- forms

def test_unlabelled_input_reports_label_placeholder_and_autocomplete():
    issues = run(check_forms, '<input type="email" name="email" placeholder="Email">')
    assert ids(issues) == ["input-no-label-1", "input-placeholder-only-1", "input-no-autocomplete-1"]
    assert [i.severity for i in issues] == ["critical", "warning", "info"]
    assert 'autocomplete="email"' in issues[2].fix


def test_label_for_and_wrapping_label_both_count():
    labelled = '<label for="email">Email</label><input type="email" id="email" name="email" autocomplete="email">'
    wrapped = '<label>Search <input type="text" name="q"></label>'
    assert run(check_forms, labelled) == []
    assert run(check_forms, wrapped) == []


def test_hidden_and_submit_inputs_are_skipped():
    code = '<input type="hidden" name="form_type"><input type="submit" value="Go">'
    assert run(check_forms, code) == []


def test_phone_field_label_suggestion():
    issue = run(check_forms, '<input type="tel" name="phone" autocomplete="tel">')[0]
    assert issue.id == "input-no-label-1"
    assert "Phone number" in issue.fix


def test_select_without_label():
    issues = run(check_forms, '<select name="size"><option>S</option></select>')
    assert ids(issues) == ["select-no-label-1"]


# ---- headings

def test_skipped_heading_level():
    issues = run(check_headings, "<h1>Shop</h1>\n<h3>New in</h3>")
    assert ids(issues) == ["heading-skip-2"]
    assert issues[0].category == "structure"


def test_empty_heading():
    assert ids(run(check_headings, "<h2>  </h2>")) == ["heading-empty-1"]


def test_sequential_headings_pass():
    assert run(check_headings, "<h1>A</h1><h2>B</h2><h3>C</h3><h2>D</h2>") == []


# ---- aria

def test_aria_hidden_on_focusable_element():
    issues = run(check_aria, '<a href="/sale" aria-hidden="true">Sale</a>')
    assert ids(issues) == ["aria-hidden-focusable-1"]
    assert issues[0].severity == "critical"


def test_aria_hidden_with_negative_tabindex_is_fine():
    assert run(check_aria, '<span aria-hidden="true" tabindex="-1">*</span>') == []


def test_invalid_role():
    issues = run(check_aria, '<div role="fancy-box"></div>')
    assert ids(issues) == ["aria-invalid-role-1"]
    assert run(check_aria, '<div role="dialog"></div>') == []


# ---- focus, navigation, interaction

def test_outline_none_without_alternative():
    assert ids(run(check_focus_styles, ".btn:focus { outline: none; }")) == ["focus-outline-none-1"]
    assert run(check_focus_styles, ".btn:focus { outline: none; box-shadow: 0 0 0 2px #000; }") == []


def test_header_without_skip_link():
    issues = run(check_navigation, '<nav aria-label="Main"></nav>', section="header")
    assert ids(issues) == ["nav-no-skip-link"]
    assert issues[0].line is None
    assert issues[0].standard_reference == "2.4.1 Bypass Blocks"
    with_skip = '<a class="skip-link" href="#main">Skip to content</a><nav aria-label="Main"></nav>'
    assert run(check_navigation, with_skip, section="header") == []


def test_multiple_unlabelled_navs():
    code = "<nav>\n</nav>\n<nav class='footer-menu'></nav>"
    issues = run(check_navigation, code, section="menu-drawer")
    assert ids(issues) == ["nav-no-label-1", "nav-no-label-3"]


def test_single_nav_needs_no_label():
    assert run(check_navigation, "<nav></nav>", section="menu-drawer") == []


def test_positive_tabindex():
    assert ids(run(check_interactive, '<a href="/" tabindex="3">Home</a>')) == ["tabindex-positive-1"]
    assert run(check_interactive, '<div tabindex="0"></div>') == []


def test_mouse_only_handlers():
    assert ids(run(check_interactive, '<div onmouseover="show()">Menu</div>')) == ["mouse-only-1"]
    assert run(check_interactive, '<div onmouseover="show()" onfocus="show()">Menu</div>') == []


# ---- scoring & report

def _issue(severity):
    return Issue(id="x", category="images", severity=severity, standard_reference="", title="", description="")


def test_score_deductions():
    issues = [_issue("critical"), _issue("warning"), _issue("info")]
    assert calculate_accessibility_score(issues) == 86
    assert calculate_accessibility_score([_issue("critical")] * 11) == 0
    assert calculate_accessibility_score([]) == 100


def test_adding_a_critical_issue_never_raises_the_score():
    base = [_issue("warning"), _issue("info")]
    assert calculate_accessibility_score(base + [_issue("critical")]) <= calculate_accessibility_score(base)


def test_empty_source_has_no_issues():
    result = analyze_accessibility("footer", "")
    assert result.issues == []
    assert result.score == 100


def test_report_counts_and_summary():
    a = analyze_accessibility("hero", '<img src="a.jpg">')
    b = analyze_accessibility("newsletter", '<a href="/x">more</a>')
    report = generate_accessibility_report([a, b])
    assert report.total_issues == 2
    assert report.critical_count == 1
    assert report.warning_count == 1
    assert report.info_count == 0
    assert report.overall_score == 87
    assert set(report.summary) == {"images", "forms", "contrast", "navigation", "interactive", "structure"}
    assert report.summary["images"] == 1
    assert report.summary["navigation"] == 1
    assert report.summary["contrast"] == 0


def test_accessibility_label():
    assert accessibility_label(95) == "Excellent"
    assert accessibility_label(70) == "Good"
    assert accessibility_label(50) == "Problematic"
    assert accessibility_label(10) == "Critical"
