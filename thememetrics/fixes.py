"""
Context-sensitive remediation snippets.

Each table is an ordered list of (result, keywords) entries; the first entry
whose keywords match wins, the trailing default catches everything else.
"""

import re
from typing import Dict, Optional, Tuple

IMG_OPEN = re.compile(r'<img\s+')
BUTTON_OPEN = re.compile(r'<button\s+')

# ---- Images: (kind, keywords found in the tag, alt value, hint)
IMAGE_FIXES: Tuple[Tuple[str, Tuple[str, ...], str, str], ...] = (
    ('icon', ('icon',), '',
     'Icons are decorative: keep alt="" or add aria-hidden="true".'),
    ('logo', ('logo',), 'Logo',
     'Replace "Logo" with your brand name, e.g. alt="Acme Logo".'),
    ('product', ('product', 'item'), '{{ product.title | escape }}',
     'The product title is filled in automatically.'),
    ('banner', ('banner', 'hero', 'slide', 'section.settings'), "{{ section.settings.image_alt | default: '' }}",
     'Add a field to the section schema:\n'
     '{\n  "type": "text",\n  "id": "image_alt",\n  "label": "Image description"\n}'),
)
GENERIC_IMAGE_FIX = ('generic', (), 'Describe the image here',
                     'Replace "Describe the image here" with a short description of the image content.')


def classify_image(img_tag: str) -> Tuple[str, Tuple[str, ...], str, str]:
    for entry in IMAGE_FIXES:
        if any(kw in img_tag for kw in entry[1]):
            return entry
    return GENERIC_IMAGE_FIX


def _insert_attribute(rx: re.Pattern, tag: str, opening: str) -> str:
    return rx.sub(lambda _m: opening, tag, count=1)


def image_alt_fix(img_tag: str) -> str:
    _kind, _keywords, alt, hint = classify_image(img_tag)
    fixed = _insert_attribute(IMG_OPEN, img_tag, f'<img alt="{alt}" ')
    return f'{fixed}\n\n💡 {hint}'


# ---- Buttons: (label, keywords in the tag, keywords in the inner content)
BUTTON_LABELS: Tuple[Tuple[str, Tuple[str, ...], Tuple[str, ...]], ...] = (
    ('Open cart', ('cart', 'bag'), ()),
    ('Open menu', ('menu', 'hamburger'), ()),
    ('Close', ('close',), ('×', 'x')),
)
DEFAULT_BUTTON_LABEL = 'Describe the action'


def suggest_button_label(button_tag: str, content: str) -> str:
    for label, tag_keywords, content_keywords in BUTTON_LABELS:
        if any(kw in button_tag for kw in tag_keywords) or any(kw in content for kw in content_keywords):
            return label
    return DEFAULT_BUTTON_LABEL


def button_label_fix(button_tag: str, content: str) -> str:
    label = suggest_button_label(button_tag, content)
    fixed = _insert_attribute(BUTTON_OPEN, button_tag, f'<button aria-label="{label}" ')
    return f'{fixed[:200]}\n\n💡 Or add visible text:\n<button>Menu</button>'


# ---- Inputs: (label, matching input types, keywords in the name attribute)
INPUT_LABELS: Tuple[Tuple[str, Tuple[str, ...], Tuple[str, ...]], ...] = (
    ('Address', (), ('address',)),
    ('Phone number', ('tel',), ('phone',)),
    ('Name', (), ('name',)),
    ('Password', ('password',), ()),
    ('Email address', ('email',), ('email',)),
)
DEFAULT_INPUT_LABEL = 'Field name'

AUTOCOMPLETE_TOKENS: Dict[str, str] = {
    'email': 'email',
    'name': 'name',
    'first_name': 'given-name',
    'last_name': 'family-name',
    'tel': 'tel',
    'phone': 'tel',
    'address': 'street-address',
    'zip': 'postal-code',
    'postal': 'postal-code',
    'city': 'address-level2',
    'country': 'country-name',
}


def suggest_input_label(input_type: str, input_name: str) -> str:
    for label, types, name_keywords in INPUT_LABELS:
        if input_type in types or any(kw in input_name for kw in name_keywords):
            return label
    return DEFAULT_INPUT_LABEL


def expected_autocomplete(input_type: str, input_name: str) -> Optional[str]:
    return AUTOCOMPLETE_TOKENS.get(input_name.lower()) or AUTOCOMPLETE_TOKENS.get(input_type)


def input_label_fix(input_tag: str, input_id: Optional[str], input_type: str, input_name: str) -> str:
    label = suggest_input_label(input_type, input_name)
    suggested_id = input_id or input_name or 'field-id'
    with_id = input_tag if 'id=' in input_tag else input_tag.replace('<input', f'<input id="{suggested_id}"', 1)
    with_aria = input_tag.replace('<input', f'<input aria-label="{label}"', 1)
    return (
        f'Option 1 - visible label (recommended):\n<label for="{suggested_id}">{label}</label>\n{with_id}\n\n'
        f'Option 2 - hidden label:\n{with_aria}\n\n'
        '💡 Visible labels help every user!'
    )


# ---- Links & navigation

def link_label_fix(link_tag: str) -> str:
    fixed = re.sub(r'<a\s+', lambda _m: '<a aria-label="Describe the link target" ', link_tag, count=1)
    return (f'{fixed[:200]}\n\n💡 Or put visible text between <a> and </a>:\n'
            '<a href="...">View now</a>')


def nav_label_fix(nav_tag: str) -> str:
    fixed = re.sub(r'<nav\b', lambda _m: '<nav aria-label="Main navigation"', nav_tag, count=1)
    return (f'{fixed}\n\n💡 Use descriptive names:\n'
            '• "Main navigation" for the main menu\n'
            '• "Footer navigation" for footer links\n'
            '• "Breadcrumb" for breadcrumb navigation\n'
            '• "Product filters" for filter menus')


# ---- Image delivery

SRCSET_FIX = ('srcset="{{ image | image_url: width: 400 }} 400w,\n'
              '        {{ image | image_url: width: 800 }} 800w,\n'
              '        {{ image | image_url: width: 1200 }} 1200w"\n'
              'sizes="(max-width: 600px) 100vw, 50vw"')
SIZES_FIX = 'sizes="(max-width: 600px) 100vw, 50vw"'
HERO_PRELOAD_FIX = ('<link rel="preload" as="image" '
                    'href="{{ section.settings.image | image_url: width: 1200 }}" fetchpriority="high">')


def image_url_fix(image_ref: str = 'image', width: Optional[int] = None, fmt: Optional[str] = None) -> str:
    """Liquid output using the image_url filter, e.g. {{ image | image_url: width: 800, format: 'webp' }}"""
    args = []
    if width:
        args.append(f'width: {width}')
    if fmt:
        args.append(f"format: '{fmt}'")
    filter_call = 'image_url' + (': ' + ', '.join(args) if args else '')
    return f'{{{{ {image_ref} | {filter_call} }}}}'
