"""
Structural feature extraction for a single template section.

Everything here is a static text heuristic:
- complexity_score: weighted, capped count of Liquid/JS constructs (0-100)
- estimated_load_time_ms: a rough estimate derived from complexity and heavy
  markers. It is NOT a measurement and must never be shown as one.
- boolean flags for video, animations, lazy loading, responsive images, preload
"""

import re
from typing import Dict, List

from .classifier import classify_section_type
from .models import Section
from .preprocess import round_half_up, section_name, split_lines

LIQUID_LOOP = re.compile(r'{%\s*for')
LIQUID_CONDITION = re.compile(r'{%\s*if')
LIQUID_ASSIGN = re.compile(r'{%\s*assign')
LIQUID_CAPTURE = re.compile(r'{%\s*capture')
SCRIPT_TAG = re.compile(r'<script')
IMAGE_OUTPUT = re.compile(r'\{\{\s*.*\|\s*image_url')
IMG_TAG = re.compile(r'<img')
EXTERNAL_SRC = re.compile(r'src=["\'][^"\']*https?://')
PRODUCT_LOOP = re.compile(r'for\s+product\s+in')
INLINE_STYLE = re.compile(r'style=["\'][^"\']+["\']')

# (min lines exclusive, points), highest tier first.
# Files past 200 lines earn the full 30.
LINE_TIERS = ((200, 30), (100, 10), (50, 5))

# Per-type load-time benchmarks in ms (fashion vertical averages).
SECTION_BENCHMARKS: Dict[str, Dict[str, int]] = {
    'hero': {'avg_load_time': 800, 'max_recommended': 1200},
    'product_grid': {'avg_load_time': 600, 'max_recommended': 1000},
    'featured_collection': {'avg_load_time': 500, 'max_recommended': 800},
    'video': {'avg_load_time': 2000, 'max_recommended': 2500},
    'newsletter': {'avg_load_time': 200, 'max_recommended': 400},
    'testimonials': {'avg_load_time': 400, 'max_recommended': 600},
    'image_with_text': {'avg_load_time': 400, 'max_recommended': 600},
    'instagram': {'avg_load_time': 1500, 'max_recommended': 2000},
    'announcement': {'avg_load_time': 100, 'max_recommended': 200},
    'header': {'avg_load_time': 300, 'max_recommended': 500},
    'footer': {'avg_load_time': 200, 'max_recommended': 400},
    'custom': {'avg_load_time': 500, 'max_recommended': 800},
}

THEME_BENCHMARKS = {
    'avg_load_time_ms': 2500,
    'avg_health_score': 72,
    'avg_sections_count': 8,
    'avg_mobile_score': 78,
}


def _count(rx: re.Pattern, content: str) -> int:
    return len(rx.findall(content))


def _has_any(content: str, *markers: str) -> bool:
    return any(m in content for m in markers)


def count_lines(content: str) -> int:
    return len(split_lines(content))


# ---- Complexity & load time

def calculate_complexity_score(content: str) -> int:
    score = 0
    lines = count_lines(content)
    for threshold, points in LINE_TIERS:
        if lines > threshold:
            score += points
            break

    score += min(_count(LIQUID_LOOP, content) * 5, 25)
    score += min(_count(LIQUID_CONDITION, content) * 2, 15)
    score += min(_count(LIQUID_ASSIGN, content) * 1, 10)
    score += min(_count(LIQUID_CAPTURE, content) * 3, 10)
    score += min(_count(SCRIPT_TAG, content) * 8, 20)

    if _has_any(content, 'video', '.mp4'): score += 15
    if 'iframe' in content: score += 12
    if _has_any(content, 'instagram', 'twitter', 'facebook'): score += 8
    if _has_any(content, 'animation', '@keyframes'): score += 5
    if 'transition' in content: score += 3
    if _has_any(content, 'backdrop-filter', 'filter:'): score += 3

    return max(0, min(100, score))


def estimate_load_time(content: str, complexity_score: int) -> int:
    """Heuristic load-time estimate in ms. Not a measured value."""
    total = 100 + complexity_score * 8

    if _has_any(content, 'video', '.mp4'): total += 1500
    if 'iframe' in content: total += 800
    if _has_any(content, 'youtube', 'vimeo'): total += 1200
    if _has_any(content, 'swiper', 'slick', 'flickity'): total += 400
    if _has_any(content, 'slideshow', 'carousel'): total += 300

    images = _count(IMAGE_OUTPUT, content) + _count(IMG_TAG, content)
    total += images * 100
    total += _count(EXTERNAL_SRC, content) * 200
    total += _count(PRODUCT_LOOP, content) * 150

    return max(0, round_half_up(total))


# ---- Feature flags

def has_video(content: str) -> bool:
    return _has_any(content, '<video', '.mp4', '.webm', 'youtube', 'vimeo', 'video_url')


def has_animations(content: str) -> bool:
    # aos / gsap / motion cover the common animation libraries
    return _has_any(content, 'animation', '@keyframes', 'transition', 'animate', 'aos', 'gsap', 'motion')


def has_lazy_loading(content: str) -> bool:
    return _has_any(content, 'loading="lazy"', "loading='lazy'", 'lazy-load', 'lazyload', 'data-src')


def has_responsive_images(content: str) -> bool:
    return ('srcset' in content
            or ('image_url' in content and 'widths:' in content)
            or 'sizes:' in content)


def has_preload(content: str) -> bool:
    return _has_any(content, 'rel="preload"', "rel='preload'", 'fetchpriority')


# ---- Section record

def analyze_section(filename: str, content: str) -> Section:
    name = section_name(filename)
    complexity = calculate_complexity_score(content)
    return Section(
        name=name,
        section_type=classify_section_type(name, content),
        raw_source=content,
        lines_of_code=count_lines(content),
        complexity_score=complexity,
        estimated_load_time_ms=estimate_load_time(content, complexity),
        has_video=has_video(content),
        has_animations=has_animations(content),
        has_lazy_loading=has_lazy_loading(content),
        has_responsive_images=has_responsive_images(content),
        has_preload=has_preload(content),
        liquid_loops=_count(LIQUID_LOOP, content),
        liquid_assigns=_count(LIQUID_ASSIGN, content),
        liquid_conditions=_count(LIQUID_CONDITION, content),
        liquid_captures=_count(LIQUID_CAPTURE, content),
        external_scripts=_count(EXTERNAL_SRC, content),
        inline_styles=_count(INLINE_STYLE, content),
    )


# ---- Benchmarks

def benchmark_for(section_type: str) -> Dict[str, int]:
    return SECTION_BENCHMARKS.get(section_type, SECTION_BENCHMARKS['custom'])


def get_section_status(section: Section) -> str:
    benchmark = benchmark_for(section.section_type)
    if section.estimated_load_time_ms <= benchmark['avg_load_time']:
        return 'optimal'
    if section.estimated_load_time_ms <= benchmark['max_recommended']:
        return 'warning'
    return 'critical'


def count_problematic_sections(sections: List[Section]) -> int:
    return sum(
        1 for s in sections
        if s.estimated_load_time_ms > benchmark_for(s.section_type)['max_recommended']
        or s.complexity_score > 60
    )
