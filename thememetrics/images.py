"""
Image delivery checks for Liquid section source.

Same shape as the accessibility engine: every check is a pure function
(code, lines, section) -> List[ImageIssue], registered in IMAGE_CHECKS and run
in table order by analyze_images(). Savings figures are rough estimates, not
measurements; nothing here fetches an image.
"""

import re
from typing import Callable, Dict, List, Optional, Tuple

from .fixes import HERO_PRELOAD_FIX, SIZES_FIX, SRCSET_FIX, image_url_fix
from .models import (
    IMAGE_CATEGORIES,
    IMAGE_SEVERITIES,
    Dimensions,
    ImageIssue,
    ImageReport,
    SectionImages,
)
from .preprocess import line_number, round_half_up, snippet, split_lines

SEVERITY_WEIGHTS = {'critical': 15, 'high': 8, 'medium': 4, 'low': 1}

AVERAGE_IMAGE_BYTES = 500 * 1024
MOBILE_BANDWIDTH_BPS = 3 * 1024 * 1024

PLATFORM_CDN = 'cdn.shopify.com'
TRUSTED_IMAGE_CDNS = ('cloudinary.com', 'imgix.net', 'cloudflare.com')
MAX_USEFUL_WIDTH = 1200
OVERSIZED_WIDTH = 2000

LAZY_HERO_MARKERS = ('hero', 'header', 'banner')
PRELOAD_HERO_MARKERS = LAZY_HERO_MARKERS + ('slideshow',)
NON_CONTENT_IMAGE_HINTS = ('icon', 'logo', 'favicon')

# ---- Patterns
IMG_TAG = re.compile(r'<img\s+[^>]*>', re.I)
BACKGROUND_URL = re.compile(r'background(?:-image)?\s*:\s*url\([^)]+\)', re.I)
LEGACY_FILTER_TAG = re.compile(r'<img\s+[^>]*\{\{[^}]*\|\s*img_url[^}]*\}\}[^>]*>', re.I)
LIQUID_OUTPUT_REF = re.compile(r'\{\{\s*([^|}]+)')
HARDCODED_FORMAT = re.compile(r'<img\s+[^>]*src\s*=\s*["\'][^"\']*\.(jpg|jpeg|png)["\'][^>]*>', re.I)
MASTER_SIZE = re.compile(r'<img\s+[^>]*img_url:\s*["\']master["\'][^>]*>', re.I)
LEGACY_SIZE = re.compile(r'img_url:\s*["\'](\d+)x(\d+)?["\']', re.I)
LEGACY_FILTER = re.compile(r'\|\s*img_url\s*:', re.I)
ASSET_URL_IMAGE = re.compile(r'\{\{\s*["\'][^"\']+\.(jpg|jpeg|png|gif|webp)["\']\s*\|\s*asset_url', re.I)
EXTERNAL_IMAGE = re.compile(
    r'src\s*=\s*["\'](https?://(?!' + re.escape(PLATFORM_CDN) + r')[^"\']+\.(jpg|jpeg|png|gif|webp))["\']', re.I)
LOADING_ATTR = re.compile(r'(?<![\w-])loading\s*=\s*["\']?(\w+)', re.I)


def _loading(tag: str) -> Optional[str]:
    m = LOADING_ATTR.search(tag)
    return m.group(1).lower() if m else None


def _is_hero_like(section: str, markers: Tuple[str, ...]) -> bool:
    name = section.lower()
    return any(marker in name for marker in markers)


# ---- Format

def check_webp_format(code: str, lines: List[str], section: str) -> List[ImageIssue]:
    issues: List[ImageIssue] = []

    for m in LEGACY_FILTER_TAG.finditer(code):
        img_tag = m.group(0)
        if re.search(r'format\s*:', img_tag):
            continue
        ref = LIQUID_OUTPUT_REF.search(img_tag)
        image_ref = ref.group(1).strip() if ref else 'image'
        line = line_number(code, m.start(), lines)
        issues.append(ImageIssue(
            id=f'no-webp-{section}-{line}',
            severity='high',
            category='format',
            kind='no-webp',
            image_name=image_ref,
            section=section,
            line=line,
            element=snippet(img_tag, 150, ellipsis=True),
            title='Image not served as WebP',
            description='This image does not request the WebP format. WebP is 25-35% smaller than JPEG.',
            fix=image_url_fix(image_ref, width=800, fmt='webp'),
            savings_percent=30,
        ))

    for m in HARDCODED_FORMAT.finditer(code):
        img_tag = m.group(0)
        if PLATFORM_CDN in img_tag:
            continue
        extension = m.group(1).lower()
        line = line_number(code, m.start(), lines)
        issues.append(ImageIssue(
            id=f'hardcoded-format-{section}-{line}',
            severity='medium',
            category='format',
            kind='hardcoded-format',
            image_name=f'*.{extension}',
            section=section,
            line=line,
            element=snippet(img_tag, 150),
            title=f'Hardcoded {extension.upper()} format',
            description='The image URL is hardcoded. The image_url filter optimizes format and size automatically.',
            fix=image_url_fix(fmt='webp'),
            savings_percent=25,
        ))

    return issues


# ---- Size

def check_image_dimensions(code: str, lines: List[str], section: str) -> List[ImageIssue]:
    issues: List[ImageIssue] = []

    for m in MASTER_SIZE.finditer(code):
        line = line_number(code, m.start(), lines)
        issues.append(ImageIssue(
            id=f'master-size-{section}-{line}',
            severity='critical',
            category='size',
            kind='master-size',
            image_name='image',
            section=section,
            line=line,
            element=snippet(m.group(0), 150),
            title='Image loaded at original size',
            description='"master" loads the image at full resolution, which can be several MB.',
            fix=image_url_fix(width=MAX_USEFUL_WIDTH),
            savings_percent=70,
        ))

    for m in LEGACY_SIZE.finditer(code):
        width = int(m.group(1))
        if width <= OVERSIZED_WIDTH:
            continue
        height = int(m.group(2)) if m.group(2) else width
        line = line_number(code, m.start(), lines)
        issues.append(ImageIssue(
            id=f'oversized-{section}-{line}',
            severity='high',
            category='size',
            kind='oversized',
            image_name='image',
            section=section,
            line=line,
            element=m.group(0),
            title=f'Image too large ({width}px)',
            description='Most screens need at most 1200-1600px of image width.',
            fix=f"img_url: '{MAX_USEFUL_WIDTH}x'",
            savings_percent=round_half_up((1 - MAX_USEFUL_WIDTH / width) * 100),
            current_dimensions=Dimensions(width, height),
            recommended_dimensions=Dimensions(MAX_USEFUL_WIDTH, round_half_up(height * MAX_USEFUL_WIDTH / width)),
        ))

    return issues


# ---- Loading

def check_lazy_loading(code: str, lines: List[str], section: str) -> List[ImageIssue]:
    issues: List[ImageIssue] = []
    hero = _is_hero_like(section, LAZY_HERO_MARKERS)

    for m in IMG_TAG.finditer(code):
        img_tag = m.group(0)
        line = line_number(code, m.start(), lines)
        loading = _loading(img_tag)

        if not hero:
            if loading not in ('lazy', 'eager'):
                issues.append(ImageIssue(
                    id=f'no-lazy-{section}-{line}',
                    severity='medium',
                    category='loading',
                    kind='no-lazy',
                    image_name='image',
                    section=section,
                    line=line,
                    element=snippet(img_tag, 150),
                    title='Image without lazy loading',
                    description='Images below the fold should be lazy-loaded.',
                    fix='Add loading="lazy"',
                ))
            continue

        # the hero image is usually the LCP element
        if loading == 'lazy':
            issues.append(ImageIssue(
                id=f'hero-lazy-{section}-{line}',
                severity='high',
                category='loading',
                kind='hero-lazy',
                image_name='hero image',
                section=section,
                line=line,
                element=snippet(img_tag, 150),
                title='Hero image is lazy-loaded',
                description='The most important image should not be lazy-loaded. It delays the largest contentful paint.',
                fix='Remove loading="lazy" or set loading="eager"',
            ))
        if 'fetchpriority' not in img_tag.lower():
            issues.append(ImageIssue(
                id=f'hero-no-priority-{section}-{line}',
                severity='medium',
                category='loading',
                kind='no-fetchpriority',
                image_name='hero image',
                section=section,
                line=line,
                element=snippet(img_tag, 150),
                title='Hero image without fetchpriority',
                description='fetchpriority="high" tells the browser this image matters most.',
                fix='Add fetchpriority="high"',
            ))

    return issues


def check_responsive_images(code: str, lines: List[str], section: str) -> List[ImageIssue]:
    issues: List[ImageIssue] = []

    for m in IMG_TAG.finditer(code):
        img_tag = m.group(0)
        lowered = img_tag.lower()
        if any(hint in lowered for hint in NON_CONTENT_IMAGE_HINTS):
            continue
        line = line_number(code, m.start(), lines)

        if 'srcset' not in lowered:
            issues.append(ImageIssue(
                id=f'no-srcset-{section}-{line}',
                severity='medium',
                category='size',
                kind='no-srcset',
                image_name='image',
                section=section,
                line=line,
                element=snippet(img_tag, 150),
                title='No responsive srcset',
                description='Without srcset, mobile visitors download the same large image as desktop visitors.',
                fix=SRCSET_FIX,
                savings_percent=40,
            ))
        elif 'sizes=' not in lowered:
            issues.append(ImageIssue(
                id=f'no-sizes-{section}-{line}',
                severity='low',
                category='size',
                kind='no-sizes',
                image_name='image',
                section=section,
                line=line,
                element=snippet(img_tag, 100),
                title='srcset without sizes attribute',
                description='The sizes attribute lets the browser pick the right candidate from srcset.',
                fix=SIZES_FIX,
            ))

    return issues


# ---- Platform filters

def check_image_url_filter(code: str, lines: List[str], section: str) -> List[ImageIssue]:
    issues: List[ImageIssue] = []

    legacy = list(LEGACY_FILTER.finditer(code))
    if legacy:
        issues.append(ImageIssue(
            id=f'old-img-url-{section}',
            severity='medium',
            category='platform',
            kind='old-img-url',
            image_name='multiple images',
            section=section,
            line=line_number(code, legacy[0].start(), lines),
            element=f'{len(legacy)}x img_url filter found',
            title='Deprecated img_url filter',
            description='The image_url filter is faster and supports more formats.',
            fix=image_url_fix(width=800, fmt='webp'),
        ))

    for m in ASSET_URL_IMAGE.finditer(code):
        line = line_number(code, m.start(), lines)
        issues.append(ImageIssue(
            id=f'asset-url-image-{section}-{line}',
            severity='low',
            category='platform',
            kind='asset-url-image',
            image_name=f'*.{m.group(1).lower()}',
            section=section,
            line=line,
            element=m.group(0),
            title='Image served through asset_url',
            description='Theme assets are not resized or converted. Upload the image to Files or a section setting.',
            fix='Upload the image to the Files area and render it with image_url',
        ))

    return issues


def check_image_width_height(code: str, lines: List[str], section: str) -> List[ImageIssue]:
    issues: List[ImageIssue] = []

    for m in IMG_TAG.finditer(code):
        img_tag = m.group(0)
        lowered = img_tag.lower()
        has_width = 'width=' in lowered or 'width:' in lowered
        has_height = 'height=' in lowered or 'height:' in lowered
        if has_width or has_height or 'aspect-ratio' in lowered:
            continue
        line = line_number(code, m.start(), lines)
        issues.append(ImageIssue(
            id=f'no-dimensions-{section}-{line}',
            severity='medium',
            category='loading',
            kind='no-dimensions',
            image_name='image',
            section=section,
            line=line,
            element=snippet(img_tag, 150),
            title='Image without dimensions',
            description='Without width/height attributes the layout can shift while the image loads (CLS).',
            fix='Add width="800" height="600" or style="aspect-ratio: 4/3"',
        ))

    return issues


def check_preload_hero(code: str, lines: List[str], section: str) -> List[ImageIssue]:
    if not _is_hero_like(section, PRELOAD_HERO_MARKERS):
        return []
    has_preload = "rel=\"preload\"" in code or "rel='preload'" in code
    has_image = '<img' in code or 'background-image' in code
    if not has_image or has_preload:
        return []
    return [ImageIssue(
        id=f'no-preload-hero-{section}',
        severity='low',
        category='loading',
        kind='no-preload',
        image_name='hero image',
        section=section,
        line=1,
        element='Hero section',
        title='Hero image without preload',
        description='A <link rel="preload"> for the hero image can improve the largest contentful paint.',
        fix=HERO_PRELOAD_FIX,
    )]


def check_external_images(code: str, lines: List[str], section: str) -> List[ImageIssue]:
    issues: List[ImageIssue] = []

    for m in EXTERNAL_IMAGE.finditer(code):
        url = m.group(1)
        if any(cdn in url for cdn in TRUSTED_IMAGE_CDNS):
            continue
        line = line_number(code, m.start(), lines)
        issues.append(ImageIssue(
            id=f'external-image-{section}-{line}',
            severity='high',
            category='platform',
            kind='external-image',
            image_name=url.rsplit('/', 1)[-1] or 'external image',
            section=section,
            line=line,
            element=snippet(url, 100),
            title='External image',
            description='This image is not served from the storefront CDN, which is slower and less reliable.',
            fix='Upload the image to the Files area and render it with image_url',
        ))

    return issues


# ---- Registry & aggregation

ImageCheck = Callable[[str, List[str], str], List[ImageIssue]]

IMAGE_CHECKS: Tuple[Tuple[str, ImageCheck], ...] = (
    ('format', check_webp_format),
    ('dimensions', check_image_dimensions),
    ('lazy_loading', check_lazy_loading),
    ('responsive', check_responsive_images),
    ('image_url', check_image_url_filter),
    ('width_height', check_image_width_height),
    ('hero_preload', check_preload_hero),
    ('external', check_external_images),
)


def count_images(code: str) -> int:
    return len(IMG_TAG.findall(code)) + len(BACKGROUND_URL.findall(code))


def calculate_image_score(issues: List[ImageIssue]) -> int:
    deductions = sum(SEVERITY_WEIGHTS.get(i.severity, 0) for i in issues)
    return max(0, min(100, 100 - deductions))


def analyze_images(section_name: str, code: str) -> SectionImages:
    lines = split_lines(code)
    issues: List[ImageIssue] = []
    for _name, check in IMAGE_CHECKS:
        issues.extend(check(code, lines, section_name))
    return SectionImages(section_name=section_name, issues=issues, image_count=count_images(code))


def generate_image_report(sections: List[SectionImages]) -> ImageReport:
    """
    Batch-level image report.

    Sizes assume AVERAGE_IMAGE_BYTES per image; potential savings apply the mean
    savings_percent of the issues that carry one to that total.
    """
    all_issues = [i for s in sections for i in s.issues]
    total_images = sum(s.image_count for s in sections)

    savings = [i.savings_percent for i in all_issues if i.savings_percent]
    avg_savings = sum(savings) / len(savings) if savings else 0.0
    current_total = total_images * AVERAGE_IMAGE_BYTES
    potential = round_half_up(current_total * avg_savings / 100)

    by_severity: Dict[str, int] = {s: sum(1 for i in all_issues if i.severity == s) for s in IMAGE_SEVERITIES}
    return ImageReport(
        score=calculate_image_score(all_issues),
        total_images=total_images,
        issues_count=len(all_issues),
        current_total_size=current_total,
        optimized_total_size=current_total - potential,
        potential_savings=potential,
        potential_savings_percent=round_half_up(avg_savings),
        estimated_time_improvement=potential / MOBILE_BANDWIDTH_BPS,
        critical_count=by_severity['critical'],
        high_count=by_severity['high'],
        medium_count=by_severity['medium'],
        low_count=by_severity['low'],
        by_category={c: sum(1 for i in all_issues if i.category == c) for c in IMAGE_CATEGORIES},
        sections=sections,
    )


def image_score_label(score: int) -> str:
    if score >= 90: return 'Excellent'
    if score >= 70: return 'Good'
    if score >= 50: return 'Needs improvement'
    return 'Critical'


def format_bytes(size: int) -> str:
    if size < 1024:
        return f'{size} B'
    if size < 1024 * 1024:
        return f'{size / 1024:.1f} KB'
    return f'{size / (1024 * 1024):.1f} MB'
