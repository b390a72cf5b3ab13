"""
WCAG 2.1 AA accessibility checks for Liquid section source.

Every detector is a pure function (code, lines, section) -> List[Issue] and is
registered in DETECTORS; analyze_accessibility() runs them in table order.
Detectors never raise on malformed markup: a pattern that does not match
simply yields no issues.
"""

import re
from typing import Callable, Dict, List, Optional, Tuple

from .fixes import (
    button_label_fix,
    expected_autocomplete,
    image_alt_fix,
    input_label_fix,
    link_label_fix,
    nav_label_fix,
)
from .models import CATEGORIES, AccessibilityReport, Issue, SectionAccessibility
from .preprocess import line_number, snippet, split_lines, surrounding

# Closed lookup table of success criteria referenced by the checks.
WCAG: Dict[str, str] = {
    'NON_TEXT_CONTENT': '1.1.1 Non-text Content',
    'CAPTIONS': '1.2.2 Captions',
    'CONTRAST_MINIMUM': '1.4.3 Contrast (Minimum)',
    'RESIZE_TEXT': '1.4.4 Resize Text',
    'KEYBOARD': '2.1.1 Keyboard',
    'NO_KEYBOARD_TRAP': '2.1.2 No Keyboard Trap',
    'BYPASS_BLOCKS': '2.4.1 Bypass Blocks',
    'PAGE_TITLED': '2.4.2 Page Titled',
    'FOCUS_ORDER': '2.4.3 Focus Order',
    'LINK_PURPOSE': '2.4.4 Link Purpose',
    'HEADINGS_LABELS': '2.4.6 Headings and Labels',
    'FOCUS_VISIBLE': '2.4.7 Focus Visible',
    'LANGUAGE': '3.1.1 Language of Page',
    'ON_INPUT': '3.2.2 On Input',
    'LABELS_INSTRUCTIONS': '3.3.2 Labels or Instructions',
    'NAME_ROLE_VALUE': '4.1.2 Name, Role, Value',
}

SEVERITY_DEDUCTIONS = {'critical': 10, 'warning': 3, 'info': 1}

VISION_IMPAIRED = '~8% of the population has a visual impairment'
HEARING_IMPAIRED = '~5% of the population has a hearing impairment'
SCREEN_READER_LINK = 'Screen reader users cannot tell where the link leads'
SCREEN_READER_BUTTON = 'Screen reader users do not know what the button does'
SCREEN_READER_FIELD = 'Screen reader users do not know what to enter'
KEYBOARD_USERS = 'Keyboard users cannot operate this element'

# ---- Patterns
TAG_STRIP = re.compile(r'<[^>]*>')
IMG_TAG = re.compile(r'<img\s+[^>]*>', re.I)
HAS_ALT = re.compile(r'(?<![\w-])alt\s*=', re.I)
EMPTY_ALT = re.compile(r'(?<![\w-])alt\s*=\s*["\']\s*["\']', re.I)
ALT_VALUE = re.compile(r'(?<![\w-])alt\s*=\s*["\']([^"\']*)["\']', re.I)
BACKGROUND_IMAGE = re.compile(r'background-image\s*:\s*url\([^)]+\)', re.I)
VIDEO_BLOCK = re.compile(r'<video\b[^>]*>.*?</video>', re.I | re.S)
LINK_BLOCK = re.compile(r'<a\s+[^>]*>(.*?)</a>', re.I | re.S)
BUTTON_BLOCK = re.compile(r'<button\s+[^>]*>(.*?)</button>', re.I | re.S)
CLICKABLE_NON_CONTROL = re.compile(r'<(div|span)\s+[^>]*onclick\s*=[^>]*>?', re.I)
INPUT_TAG = re.compile(r'<input\s+[^>]*>', re.I)
SELECT_TAG = re.compile(r'<select\s+[^>]*>', re.I)
HEADING = re.compile(r'<h([1-6])\s*[^>]*>.*?</h\1>', re.I | re.S)
EMPTY_HEADING = re.compile(r'<h([1-6])\s*[^>]*>\s*</h\1>', re.I)
OPENING_TAG = re.compile(r'<[a-zA-Z][\w-]*\b[^>]*>')
ARIA_HIDDEN_TRUE = re.compile(r'aria-hidden\s*=\s*["\']true["\']', re.I)
FOCUSABLE_ATTR = re.compile(r'(?<![\w-])(href|onclick)\s*=|(?<![\w-])tabindex\s*=\s*["\']?\s*(\d+)', re.I)
ROLE_ATTR = re.compile(r'(?<![\w-])role\s*=\s*["\']([^"\']*)["\']', re.I)
OUTLINE_REMOVED = re.compile(r'outline\s*:\s*none|outline\s*:\s*0', re.I)
NAV_TAG = re.compile(r'<nav(?:\s[^>]*)?>', re.I)
TABINDEX = re.compile(r'(?<![\w-])tabindex\s*=\s*["\']([^"\']*)["\']', re.I)
MOUSE_ONLY = re.compile(r'onmouse(over|out|enter|leave)\s*=', re.I)
LEADING_INT = re.compile(r'^\s*([+-]?\d+)')


def _attr(tag: str, name: str) -> Optional[str]:
    m = re.search(r'(?<![\w-])' + name + r'\s*=\s*["\']([^"\']*)["\']', tag, re.I)
    return m.group(1) if m else None


def _visible_text(markup: str) -> str:
    return TAG_STRIP.sub('', markup).strip()


BAD_ALT_FRAGMENTS = ('image', 'img', 'picture', 'photo', 'foto', 'bild',
                     '.jpg', '.png', '.webp', 'untitled', 'dsc_', 'img_')
INFORMATIVE_IMAGE_HINTS = ('product', 'hero', 'banner')


# ---- Images

def check_images(code: str, lines: List[str], section: str) -> List[Issue]:
    issues: List[Issue] = []

    for m in IMG_TAG.finditer(code):
        img_tag = m.group(0)
        line = line_number(code, m.start(), lines)

        if not HAS_ALT.search(img_tag):
            issues.append(Issue(
                id=f'img-no-alt-{line}',
                category='images',
                severity='critical',
                standard_reference=WCAG['NON_TEXT_CONTENT'],
                title='Image without alt text',
                description='This image has no alt attribute. Screen readers cannot describe it.',
                element=snippet(img_tag, 150, ellipsis=True),
                line=line,
                section=section,
                fix=image_alt_fix(img_tag),
                affected_users=VISION_IMPAIRED,
            ))

        if EMPTY_ALT.search(img_tag) and any(h in img_tag for h in INFORMATIVE_IMAGE_HINTS):
            fixed = EMPTY_ALT.sub(lambda _m: 'alt="{{ image.alt | escape }}"', img_tag, count=1)
            issues.append(Issue(
                id=f'img-empty-alt-{line}',
                category='images',
                severity='warning',
                standard_reference=WCAG['NON_TEXT_CONTENT'],
                title='Possibly misleading empty alt',
                description='This image looks informative but has an empty alt attribute.',
                element=snippet(img_tag, 150),
                line=line,
                section=section,
                fix=fixed[:200],
            ))

        alt = ALT_VALUE.search(img_tag)
        if alt:
            alt_text = alt.group(1).lower()
            if any(frag in alt_text for frag in BAD_ALT_FRAGMENTS) and len(alt_text) < 20:
                issues.append(Issue(
                    id=f'img-bad-alt-{line}',
                    category='images',
                    severity='info',
                    standard_reference=WCAG['NON_TEXT_CONTENT'],
                    title='Non-descriptive alt text',
                    description=f'Alt text "{alt.group(1)}" does not describe the image content.',
                    element=snippet(img_tag, 150),
                    line=line,
                    section=section,
                    fix=(f'Replace alt="{alt.group(1)}" with a descriptive text such as:\n'
                         'alt="Product photo: red summer dress"\n'
                         'or, for dynamic images:\nalt="{{ product.title | escape }}"'),
                ))

    for m in BACKGROUND_IMAGE.finditer(code):
        context = surrounding(code, m.start(), 200, 200)
        if 'aria-label' in context or 'role="img"' in context:
            continue
        line = line_number(code, m.start(), lines)
        issues.append(Issue(
            id=f'bg-img-no-alt-{line}',
            category='images',
            severity='warning',
            standard_reference=WCAG['NON_TEXT_CONTENT'],
            title='Background image without text alternative',
            description='CSS background images are invisible to screen readers.',
            line=line,
            section=section,
            fix=('Add to the element:\nrole="img" aria-label="Image description"\n\nExample:\n'
                 '<div style="background-image:..." role="img" aria-label="Hero banner showing the spring collection">'),
        ))

    for m in VIDEO_BLOCK.finditer(code):
        video = m.group(0)
        if '<track' in video or 'track ' in video:
            continue
        line = line_number(code, m.start(), lines)
        issues.append(Issue(
            id=f'video-no-captions-{line}',
            category='images',
            severity='critical',
            standard_reference=WCAG['CAPTIONS'],
            title='Video without captions',
            description='This video has no caption track.',
            line=line,
            section=section,
            fix='Add <track kind="captions" src="captions.vtt" srclang="en">.',
            affected_users=HEARING_IMPAIRED,
        ))

    return issues


# ---- Links

GENERIC_LINK_TEXTS = frozenset([
    'click here', 'hier klicken', 'read more', 'mehr lesen', 'link', 'hier', 'more', 'mehr',
])
NEW_TAB_HINTS = ('new window', 'new tab', 'neues Fenster', 'neuem Tab', 'aria-label')


def check_links(code: str, lines: List[str], section: str) -> List[Issue]:
    issues: List[Issue] = []

    for m in LINK_BLOCK.finditer(code):
        link = m.group(0)
        content = m.group(1).strip()
        line = line_number(code, m.start(), lines)
        visible = _visible_text(content)

        has_aria_label = 'aria-label' in link
        has_img_with_alt = bool(HAS_ALT.search(content)) and not EMPTY_ALT.search(content)
        if not visible and not has_aria_label and not has_img_with_alt:
            issues.append(Issue(
                id=f'link-empty-{line}',
                category='navigation',
                severity='critical',
                standard_reference=WCAG['LINK_PURPOSE'],
                title='Empty link',
                description='This link has no accessible text.',
                element=snippet(link, 150),
                line=line,
                section=section,
                fix=link_label_fix(link),
                affected_users=SCREEN_READER_LINK,
            ))

        if visible.lower() in GENERIC_LINK_TEXTS:
            issues.append(Issue(
                id=f'link-generic-{line}',
                category='navigation',
                severity='warning',
                standard_reference=WCAG['LINK_PURPOSE'],
                title='Generic link text',
                description=f'"{visible.lower()}" does not describe the link target.',
                element=snippet(link, 150),
                line=line,
                section=section,
                fix=(f'Use descriptive link text:\n\n❌ Before: <a href="...">{visible.lower()}</a>\n'
                     '✅ After: <a href="...">View all products</a>\n\n'
                     '💡 Link text should make sense out of context'),
            ))

        opens_new_tab = 'target="_blank"' in link or "target='_blank'" in link
        if opens_new_tab and not any(h in link for h in NEW_TAB_HINTS):
            issues.append(Issue(
                id=f'link-new-window-{line}',
                category='navigation',
                severity='info',
                standard_reference=WCAG['ON_INPUT'],
                title='Link opens a new tab without warning',
                description='Users should be told when a link opens in a new tab.',
                element=snippet(link, 150),
                line=line,
                section=section,
                fix=('Option 1 - visual hint:\n<a href="..." target="_blank">External page ↗</a>\n\n'
                     'Option 2 - screen reader text:\n'
                     '<a href="..." target="_blank">Link <span class="sr-only">(opens in a new tab)</span></a>'),
            ))

    return issues


# ---- Buttons

def check_buttons(code: str, lines: List[str], section: str) -> List[Issue]:
    issues: List[Issue] = []

    for m in BUTTON_BLOCK.finditer(code):
        button = m.group(0)
        content = m.group(1).strip()
        has_name = _visible_text(content) or 'aria-label' in button or '<title>' in content
        if has_name:
            continue
        line = line_number(code, m.start(), lines)
        issues.append(Issue(
            id=f'button-empty-{line}',
            category='interactive',
            severity='critical',
            standard_reference=WCAG['NAME_ROLE_VALUE'],
            title='Button without accessible name',
            description='This button has no accessible text.',
            element=snippet(button, 150),
            line=line,
            section=section,
            fix=button_label_fix(button, content),
            affected_users=SCREEN_READER_BUTTON,
        ))

    for m in CLICKABLE_NON_CONTROL.finditer(code):
        element = m.group(0)
        if 'role="button"' in element or "role='button'" in element:
            continue
        line = line_number(code, m.start(), lines)
        issues.append(Issue(
            id=f'fake-button-{line}',
            category='interactive',
            severity='critical',
            standard_reference=WCAG['KEYBOARD'],
            title='Non-interactive element used as a control',
            description='A div/span with onclick cannot be reached or operated with the keyboard.',
            element=snippet(element, 150),
            line=line,
            section=section,
            fix=('Best: replace it with a <button>:\n<button onclick="...">Click me</button>\n\n'
                 'Alternative (if the markup cannot change):\n'
                 '<div onclick="..." role="button" tabindex="0" '
                 'onkeydown="if(event.key===\'Enter\')this.click()">...</div>\n\n'
                 '💡 <button> is keyboard accessible out of the box'),
            affected_users=KEYBOARD_USERS,
        ))

    return issues


# ---- Forms

SKIPPED_INPUT_TYPES = ('hidden', 'submit', 'button')


def has_wrapping_label(code: str, offset: int) -> bool:
    """True when the control at `offset` sits between an open <label> and its </label>."""
    before = code[max(0, offset - 200):offset]
    after = code[offset:offset + 200]
    opened_before = before.rfind('<label') > before.rfind('</label>')
    close_at = after.find('</label>')
    open_at = after.find('<label')
    closed_after = close_at != -1 and (open_at == -1 or close_at < open_at)
    return opened_before and closed_after


def _has_label_for(code: str, element_id: Optional[str]) -> bool:
    if not element_id:
        return False
    return f'for="{element_id}"' in code or f"for='{element_id}'" in code


def check_forms(code: str, lines: List[str], section: str) -> List[Issue]:
    issues: List[Issue] = []

    for m in INPUT_TAG.finditer(code):
        tag = m.group(0)
        input_type = (_attr(tag, 'type') or 'text').lower()
        if input_type in SKIPPED_INPUT_TYPES:
            continue
        input_id = _attr(tag, 'id')
        input_name = _attr(tag, 'name') or ''
        line = line_number(code, m.start(), lines)

        has_aria_label = 'aria-label' in tag
        has_labelledby = 'aria-labelledby' in tag
        has_label_for = _has_label_for(code, input_id)
        wrapped = has_wrapping_label(code, m.start())

        if not (has_aria_label or has_labelledby or has_label_for or wrapped):
            issues.append(Issue(
                id=f'input-no-label-{line}',
                category='forms',
                severity='critical',
                standard_reference=WCAG['LABELS_INSTRUCTIONS'],
                title='Form field without label',
                description='This input has no associated label.',
                element=snippet(tag, 150),
                line=line,
                section=section,
                fix=input_label_fix(tag, input_id, input_type, input_name),
                affected_users=SCREEN_READER_FIELD,
            ))

        if 'placeholder=' in tag and not (has_aria_label or has_label_for or wrapped):
            placeholder = _attr(tag, 'placeholder') or 'Text'
            issues.append(Issue(
                id=f'input-placeholder-only-{line}',
                category='forms',
                severity='warning',
                standard_reference=WCAG['LABELS_INSTRUCTIONS'],
                title='Placeholder used instead of a label',
                description='The placeholder disappears while typing and does not replace a label.',
                element=snippet(tag, 150),
                line=line,
                section=section,
                fix=(f'Add a visible label:\n\n<label for="field-id">{placeholder}</label>\n{tag}\n\n'
                     '💡 The placeholder can still show an example:\nplaceholder="e.g. jane@example.com"'),
            ))

        token = expected_autocomplete(input_type, input_name)
        if token and 'autocomplete=' not in tag:
            issues.append(Issue(
                id=f'input-no-autocomplete-{line}',
                category='forms',
                severity='info',
                standard_reference=WCAG['LABELS_INSTRUCTIONS'],
                title='Missing autocomplete attribute',
                description='Autocomplete helps users fill in forms faster.',
                element=snippet(tag, 100),
                line=line,
                section=section,
                fix=f'Add autocomplete="{token}".',
            ))

    for m in SELECT_TAG.finditer(code):
        tag = m.group(0)
        if 'aria-label' in tag or _has_label_for(code, _attr(tag, 'id')) or has_wrapping_label(code, m.start()):
            continue
        line = line_number(code, m.start(), lines)
        issues.append(Issue(
            id=f'select-no-label-{line}',
            category='forms',
            severity='critical',
            standard_reference=WCAG['LABELS_INSTRUCTIONS'],
            title='Select without label',
            description='This select element has no associated label.',
            element=snippet(tag, 100),
            line=line,
            section=section,
            fix='Add <label for="select-id">Choose an option</label>.',
        ))

    return issues


# ---- Headings

def check_headings(code: str, lines: List[str], section: str) -> List[Issue]:
    issues: List[Issue] = []
    headings: List[Tuple[int, int]] = [
        (int(m.group(1)), line_number(code, m.start(), lines)) for m in HEADING.finditer(code)
    ]

    for (prev_level, _), (level, line) in zip(headings, headings[1:]):
        if level > prev_level + 1:
            issues.append(Issue(
                id=f'heading-skip-{line}',
                category='structure',
                severity='warning',
                standard_reference=WCAG['HEADINGS_LABELS'],
                title='Skipped heading level',
                description=f'Jump from h{prev_level} to h{level}; h{prev_level + 1} is missing.',
                line=line,
                section=section,
                fix=f'Use h{prev_level + 1} instead of h{level} or add the intermediate headings.',
            ))

    for m in EMPTY_HEADING.finditer(code):
        line = line_number(code, m.start(), lines)
        issues.append(Issue(
            id=f'heading-empty-{line}',
            category='structure',
            severity='warning',
            standard_reference=WCAG['HEADINGS_LABELS'],
            title='Empty heading',
            description='This heading has no content.',
            line=line,
            section=section,
            fix='Add text or remove the empty heading element.',
        ))

    return issues


# ---- ARIA

VALID_ROLES = frozenset([
    'alert', 'alertdialog', 'application', 'article', 'banner', 'button', 'cell', 'checkbox',
    'columnheader', 'combobox', 'complementary', 'contentinfo', 'definition', 'dialog', 'directory',
    'document', 'feed', 'figure', 'form', 'grid', 'gridcell', 'group', 'heading', 'img', 'link',
    'list', 'listbox', 'listitem', 'log', 'main', 'marquee', 'math', 'menu', 'menubar', 'menuitem',
    'menuitemcheckbox', 'menuitemradio', 'navigation', 'none', 'note', 'option', 'presentation',
    'progressbar', 'radio', 'radiogroup', 'region', 'row', 'rowgroup', 'rowheader', 'scrollbar',
    'search', 'searchbox', 'separator', 'slider', 'spinbutton', 'status', 'switch', 'tab', 'table',
    'tablist', 'tabpanel', 'term', 'textbox', 'timer', 'toolbar', 'tooltip', 'tree', 'treegrid',
    'treeitem',
])


def _is_focusable(tag: str) -> bool:
    # tabindex="-1" removes the element from the tab order, so it is not counted
    return FOCUSABLE_ATTR.search(tag) is not None


def check_aria(code: str, lines: List[str], section: str) -> List[Issue]:
    issues: List[Issue] = []

    for m in OPENING_TAG.finditer(code):
        tag = m.group(0)
        if not ARIA_HIDDEN_TRUE.search(tag) or not _is_focusable(tag):
            continue
        line = line_number(code, m.start(), lines)
        issues.append(Issue(
            id=f'aria-hidden-focusable-{line}',
            category='interactive',
            severity='critical',
            standard_reference=WCAG['NAME_ROLE_VALUE'],
            title='aria-hidden on a focusable element',
            description='The element is hidden from screen readers but still receives keyboard focus.',
            element=snippet(tag, 150),
            line=line,
            section=section,
            fix='Remove aria-hidden="true" or make the element unfocusable (tabindex="-1", no href).',
        ))

    for m in ROLE_ATTR.finditer(code):
        value = m.group(1).strip().lower()
        if '{{' in value or '{%' in value:
            continue
        invalid = [r for r in value.split() if r not in VALID_ROLES] if value else [value]
        if not invalid:
            continue
        line = line_number(code, m.start(), lines)
        issues.append(Issue(
            id=f'aria-invalid-role-{line}',
            category='interactive',
            severity='warning',
            standard_reference=WCAG['NAME_ROLE_VALUE'],
            title='Invalid ARIA role',
            description=f'"{value}" is not a valid ARIA role.',
            line=line,
            section=section,
            fix='Use a valid ARIA role such as "button", "link" or "dialog".',
        ))

    return issues


# ---- Focus styles

FOCUS_ALTERNATIVES = ('box-shadow', 'border', 'background')


def check_focus_styles(code: str, lines: List[str], section: str) -> List[Issue]:
    issues: List[Issue] = []
    for m in OUTLINE_REMOVED.finditer(code):
        context = surrounding(code, m.start(), 100, 100)
        if any(alt in context for alt in FOCUS_ALTERNATIVES):
            continue
        line = line_number(code, m.start(), lines)
        issues.append(Issue(
            id=f'focus-outline-none-{line}',
            category='interactive',
            severity='critical',
            standard_reference=WCAG['FOCUS_VISIBLE'],
            title='Focus indicator removed',
            description='outline:none without an alternative focus style leaves keyboard users lost.',
            line=line,
            section=section,
            fix='Add an alternative focus style: :focus { box-shadow: 0 0 0 2px #4F46E5; }',
            affected_users='Keyboard users and people with motor impairments',
        ))
    return issues


# ---- Navigation

SKIP_LINK_MARKERS = ('skip', 'Skip', 'Zum Inhalt')
SKIP_LINK_FIX = '''<a href="#main-content" class="skip-link">Skip to content</a>

💡 Place this link right after the <body> tag in theme.liquid.

CSS for the skip link (base.css):
.skip-link {
  position: absolute;
  top: -40px;
  left: 0;
  padding: 8px 16px;
  background: #4F46E5;
  color: white;
  z-index: 100;
}
.skip-link:focus {
  top: 0;
}

Then add id="main-content" to your <main> tag.'''


def check_navigation(code: str, lines: List[str], section: str) -> List[Issue]:
    issues: List[Issue] = []

    lowered = section.lower()
    if ('header' in lowered or 'navigation' in lowered) and not any(mk in code for mk in SKIP_LINK_MARKERS):
        issues.append(Issue(
            id='nav-no-skip-link',
            category='navigation',
            severity='warning',
            standard_reference=WCAG['BYPASS_BLOCKS'],
            title='Missing skip link',
            description='A "Skip to content" link lets keyboard users jump past the navigation.',
            section=section,
            fix=SKIP_LINK_FIX,
            affected_users='Keyboard users otherwise have to tab through every menu item',
        ))

    navs = list(NAV_TAG.finditer(code))
    if len(navs) > 1:
        for m in navs:
            tag = m.group(0)
            if 'aria-label' in tag:  # also covers aria-labelledby
                continue
            line = line_number(code, m.start(), lines)
            issues.append(Issue(
                id=f'nav-no-label-{line}',
                category='navigation',
                severity='warning',
                standard_reference=WCAG['BYPASS_BLOCKS'],
                title='Navigation without label',
                description='When there are several nav elements each one needs an aria-label.',
                element=snippet(tag, 100),
                line=line,
                section=section,
                fix=nav_label_fix(tag),
                affected_users='Screen reader users cannot tell the navigations apart',
            ))

    return issues


# ---- Interactive

KEYBOARD_HANDLERS = ('onfocus', 'onblur', 'onkeydown', 'onkeyup')


def check_interactive(code: str, lines: List[str], section: str) -> List[Issue]:
    issues: List[Issue] = []

    for m in TABINDEX.finditer(code):
        parsed = LEADING_INT.match(m.group(1))
        if not parsed or int(parsed.group(1)) <= 0:
            continue
        tabindex = int(parsed.group(1))
        line = line_number(code, m.start(), lines)
        issues.append(Issue(
            id=f'tabindex-positive-{line}',
            category='interactive',
            severity='warning',
            standard_reference=WCAG['FOCUS_ORDER'],
            title='Positive tabindex value',
            description=f'tabindex="{tabindex}" overrides the natural tab order.',
            line=line,
            section=section,
            fix='Use tabindex="0" or drop tabindex and order the elements correctly in the DOM.',
        ))

    for m in MOUSE_ONLY.finditer(code):
        context = surrounding(code, m.start(), 100, 200)
        if any(h in context for h in KEYBOARD_HANDLERS):
            continue
        line = line_number(code, m.start(), lines)
        issues.append(Issue(
            id=f'mouse-only-{line}',
            category='interactive',
            severity='warning',
            standard_reference=WCAG['KEYBOARD'],
            title='Mouse-only interaction',
            description='Mouse events without a keyboard equivalent.',
            line=line,
            section=section,
            fix='Add onfocus/onblur or onkeydown handlers for keyboard users.',
        ))

    return issues


# ---- Registry & scoring

Detector = Callable[[str, List[str], str], List[Issue]]

DETECTORS: Tuple[Tuple[str, Detector], ...] = (
    ('images', check_images),
    ('links', check_links),
    ('buttons', check_buttons),
    ('forms', check_forms),
    ('headings', check_headings),
    ('aria', check_aria),
    ('focus', check_focus_styles),
    ('navigation', check_navigation),
    ('interactive', check_interactive),
)


def calculate_accessibility_score(issues: List[Issue]) -> int:
    score = 100
    for issue in issues:
        score -= SEVERITY_DEDUCTIONS.get(issue.severity, 0)
    return max(0, min(100, score))


def analyze_accessibility(section_name: str, code: str) -> SectionAccessibility:
    lines = split_lines(code)
    issues: List[Issue] = []
    for _name, detector in DETECTORS:
        issues.extend(detector(code, lines, section_name))
    return SectionAccessibility(
        section_name=section_name,
        issues=issues,
        score=calculate_accessibility_score(issues),
    )


def generate_accessibility_report(sections: List[SectionAccessibility]) -> AccessibilityReport:
    all_issues = [i for s in sections for i in s.issues]
    return AccessibilityReport(
        overall_score=calculate_accessibility_score(all_issues),
        total_issues=len(all_issues),
        critical_count=sum(1 for i in all_issues if i.severity == 'critical'),
        warning_count=sum(1 for i in all_issues if i.severity == 'warning'),
        info_count=sum(1 for i in all_issues if i.severity == 'info'),
        sections=sections,
        summary={c: sum(1 for i in all_issues if i.category == c) for c in CATEGORIES},
    )


def accessibility_label(score: int) -> str:
    if score >= 90: return 'Excellent'
    if score >= 70: return 'Good'
    if score >= 50: return 'Problematic'
    return 'Critical'
