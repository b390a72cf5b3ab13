import math
import re
from typing import List

SECTION_PREFIX = re.compile(r'^sections/')
LIQUID_SUFFIX = re.compile(r'\.liquid$')


def section_name(filename: str) -> str:
    """'sections/image-banner.liquid' -> 'image-banner'"""
    name = LIQUID_SUFFIX.sub('', filename.strip())
    return SECTION_PREFIX.sub('', name)


def split_lines(code: str) -> List[str]:
    return code.split('\n')


def line_number(code: str, offset: int, lines: List[str]) -> int:
    """1-indexed line of the character at `offset`."""
    if offset >= len(code):
        return len(lines)
    return code.count('\n', 0, offset) + 1


def snippet(text: str, limit: int = 150, ellipsis: bool = False) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + ('...' if ellipsis else '')


def surrounding(code: str, offset: int, before: int, after: int) -> str:
    return code[max(0, offset - before):min(len(code), offset + after)]


def round_half_up(value: float) -> int:
    # scores and impacts were calibrated with half-up rounding, not banker's rounding
    return int(math.floor(value + 0.5))


def clamp_score(value: float) -> int:
    return max(0, min(100, int(value)))
