from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

Number = Union[int, float]

SECTION_TYPES = (
    'hero', 'product_grid', 'featured_collection', 'announcement', 'newsletter',
    'testimonials', 'image_with_text', 'video', 'instagram', 'footer', 'header',
    'custom',
)
SEVERITIES = ('critical', 'warning', 'info')
CATEGORIES = ('images', 'forms', 'contrast', 'navigation', 'interactive', 'structure')
IMAGE_SEVERITIES = ('critical', 'high', 'medium', 'low')
IMAGE_CATEGORIES = ('format', 'size', 'loading', 'platform')
EFFORTS = ('low', 'medium', 'high')
RECOMMENDATION_TYPES = ('performance', 'ux')

SCORE_SOURCE_LAB = 'thememetrics'
SCORE_SOURCE_HEURISTIC = 'thememetrics-estimated'


class InvalidBatchError(ValueError):
    """Raised when the input batch violates the engine's call contract."""


@dataclass(frozen=True)
class SectionSource:
    name: str
    content: str


@dataclass(frozen=True)
class Section:
    name: str
    section_type: str
    raw_source: str
    lines_of_code: int
    complexity_score: int
    estimated_load_time_ms: int
    has_video: bool = False
    has_animations: bool = False
    has_lazy_loading: bool = False
    has_responsive_images: bool = False
    has_preload: bool = False
    liquid_loops: int = 0
    liquid_assigns: int = 0
    liquid_conditions: int = 0
    liquid_captures: int = 0
    external_scripts: int = 0
    inline_styles: int = 0


@dataclass
class Issue:
    id: str
    category: str                # images | forms | contrast | navigation | interactive | structure
    severity: str                # critical | warning | info
    standard_reference: str      # e.g. '1.1.1 Non-text Content'
    title: str
    description: str
    element: Optional[str] = None
    line: Optional[int] = None
    section: Optional[str] = None
    fix: Optional[str] = None
    affected_users: Optional[str] = None


@dataclass
class SectionAccessibility:
    section_name: str
    issues: List[Issue]
    score: int


@dataclass
class AccessibilityReport:
    overall_score: int
    total_issues: int
    critical_count: int
    warning_count: int
    info_count: int
    sections: List[SectionAccessibility]
    summary: Dict[str, int]


@dataclass(frozen=True)
class Dimensions:
    width: int
    height: int


@dataclass
class ImageIssue:
    id: str
    severity: str                # critical | high | medium | low
    category: str                # format | size | loading | platform
    kind: str                    # e.g. no-webp, master-size, hero-lazy
    image_name: str
    section: str
    line: int
    element: str
    title: str
    description: str
    fix: str
    savings_percent: Optional[int] = None
    current_dimensions: Optional[Dimensions] = None
    recommended_dimensions: Optional[Dimensions] = None


@dataclass
class SectionImages:
    section_name: str
    issues: List[ImageIssue]
    image_count: int


@dataclass
class ImageReport:
    score: int
    total_images: int
    issues_count: int
    current_total_size: int      # bytes, assuming 500 KiB per image
    optimized_total_size: int
    potential_savings: int
    potential_savings_percent: int
    estimated_time_improvement: float  # seconds on a 3 MiB/s mobile link
    critical_count: int
    high_count: int
    medium_count: int
    low_count: int
    by_category: Dict[str, int]
    sections: List[SectionImages]


@dataclass(frozen=True)
class Condition:
    check: str
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Rule:
    id: str
    scope: str                   # section | theme
    conditions: Tuple[Condition, ...]
    type: str                    # performance | ux
    severity: str
    title: str
    description: str
    fix: str
    impact_multiplier: float     # share of monthly revenue, 0.01 == 1%
    effort: str


@dataclass
class Recommendation:
    id: str
    type: str
    severity: str
    title: str
    description: str
    fix: str
    effort: str
    estimated_revenue_impact: int
    section_name: Optional[str] = None


@dataclass(frozen=True)
class LabMetrics:
    lcp: Optional[float] = None   # ms
    cls: Optional[float] = None
    tbt: Optional[float] = None   # ms
    fcp: Optional[float] = None   # ms

    def is_empty(self) -> bool:
        return all(v is None for v in (self.lcp, self.cls, self.tbt, self.fcp))


@dataclass(frozen=True)
class ThemeContext:
    snippets_count: Optional[int] = None
    has_translations: Optional[bool] = None
    sections_above_fold: Optional[int] = None


@dataclass
class MetricScore:
    value: Optional[Number]
    score: int
    status: str                  # good | warning | poor


@dataclass
class Penalty:
    section: str
    reason: str
    points: int


@dataclass
class QualityIssue:
    section: str
    issue: str
    severity: str                # high | medium | low


@dataclass
class SpeedScore:
    score: int
    core_web_vitals: int
    section_load: int
    details: Dict[str, MetricScore]
    penalties: List[Penalty]


@dataclass
class QualityScore:
    score: int
    liquid_quality: int
    best_practices: int
    architecture: int
    issues: List[QualityIssue]


@dataclass
class ConversionScore:
    score: int
    ecommerce: int
    mobile: int
    revenue_impact: int
    estimated_monthly_loss: int


@dataclass
class ScoreBreakdown:
    overall: int
    speed: SpeedScore
    quality: QualityScore
    conversion: ConversionScore


@dataclass
class ThemeScore:
    overall: int
    score_source: str
    health_score: int
    breakdown: ScoreBreakdown


@dataclass
class AnalysisResult:
    sections: List[Section]
    accessibility: AccessibilityReport
    images: ImageReport
    recommendations: List[Recommendation]
    scores: ThemeScore
    section_status: Dict[str, str]
    problematic_sections: int
    analyzed_at: str
