"""
External input/output contract.

Pydantic DTOs with camelCase aliases mirror the engine's dataclasses; the
engine never sees these models, only the adapters (api, main, eval) do.
"""

from __future__ import annotations

from dataclasses import asdict, is_dataclass
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .models import AccessibilityReport, AnalysisResult, ImageReport, Recommendation


class ContractModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------- Requests ----------

class SectionInput(ContractModel):
    name: str = Field(..., description="Section filename, e.g. 'sections/image-banner.liquid'.")
    content: str = Field(..., description="Raw Liquid source of the section.")


class LabMetricsInput(ContractModel):
    lcp: Optional[float] = Field(default=None, ge=0, description="Largest contentful paint (ms).")
    cls: Optional[float] = Field(default=None, ge=0, description="Cumulative layout shift.")
    tbt: Optional[float] = Field(default=None, ge=0, description="Total blocking time (ms).")
    fcp: Optional[float] = Field(default=None, ge=0, description="First contentful paint (ms).")


class ThemeContextInput(ContractModel):
    snippets_count: Optional[int] = Field(default=None, ge=0)
    has_translations: Optional[bool] = None
    sections_above_fold: Optional[int] = Field(default=None, ge=0)


class AnalyzeRequest(ContractModel):
    sections: List[SectionInput]
    lab_metrics: Optional[LabMetricsInput] = None
    monthly_revenue: Optional[float] = Field(default=None, ge=0)
    theme: Optional[ThemeContextInput] = None
    analyzed_at: Optional[str] = None


class AccessibilityRequest(ContractModel):
    sections: List[SectionInput]


class ImagesRequest(ContractModel):
    sections: List[SectionInput]


class RecommendationsRequest(ContractModel):
    sections: List[SectionInput]
    monthly_revenue: Optional[float] = Field(default=None, ge=0)


# ---------- Responses ----------

class SectionDTO(ContractModel):
    name: str
    section_type: str = Field(..., alias="type")
    lines_of_code: int
    complexity_score: int
    estimated_load_time_ms: int
    has_video: bool
    has_animations: bool
    has_lazy_loading: bool
    has_responsive_images: bool
    has_preload: bool
    liquid_loops: int
    liquid_assigns: int
    liquid_conditions: int
    liquid_captures: int
    external_scripts: int
    inline_styles: int


class IssueDTO(ContractModel):
    id: str
    category: str
    severity: str
    standard_reference: str = Field(..., alias="wcagCriteria")
    title: str
    description: str
    element: Optional[str] = None
    line: Optional[int] = None
    section: Optional[str] = None
    fix: Optional[str] = None
    affected_users: Optional[str] = None


class SectionAccessibilityDTO(ContractModel):
    section_name: str
    issues: List[IssueDTO]
    score: int


class AccessibilityReportDTO(ContractModel):
    overall_score: int
    total_issues: int
    critical_count: int
    warning_count: int
    info_count: int
    sections: List[SectionAccessibilityDTO]
    summary: Dict[str, int]


class DimensionsDTO(ContractModel):
    width: int
    height: int


class ImageIssueDTO(ContractModel):
    id: str
    severity: str
    category: str
    kind: str = Field(..., alias="type")
    image_name: str
    section: str
    line: int
    element: str
    title: str
    description: str
    fix: str
    savings_percent: Optional[int] = None
    current_dimensions: Optional[DimensionsDTO] = None
    recommended_dimensions: Optional[DimensionsDTO] = None


class SectionImagesDTO(ContractModel):
    section_name: str
    issues: List[ImageIssueDTO]
    image_count: int


class ImageReportDTO(ContractModel):
    score: int
    total_images: int
    issues_count: int
    current_total_size: int
    optimized_total_size: int
    potential_savings: int
    potential_savings_percent: int
    estimated_time_improvement: float
    critical_count: int
    high_count: int
    medium_count: int
    low_count: int
    by_category: Dict[str, int]
    sections: List[SectionImagesDTO]


class RecommendationDTO(ContractModel):
    id: str
    type: str
    severity: str
    title: str
    description: str
    fix: str
    effort: str
    section_name: Optional[str] = None
    estimated_revenue_impact: int


class MetricScoreDTO(ContractModel):
    value: Optional[float] = None
    score: int
    status: str


class PenaltyDTO(ContractModel):
    section: str
    reason: str
    points: int


class QualityIssueDTO(ContractModel):
    section: str
    issue: str
    severity: str


class SpeedScoreDTO(ContractModel):
    score: int
    core_web_vitals: int
    section_load: int
    details: Dict[str, MetricScoreDTO]
    penalties: List[PenaltyDTO]


class QualityScoreDTO(ContractModel):
    score: int
    liquid_quality: int
    best_practices: int
    architecture: int
    issues: List[QualityIssueDTO]


class ConversionScoreDTO(ContractModel):
    score: int
    ecommerce: int
    mobile: int
    revenue_impact: int
    estimated_monthly_loss: int


class BreakdownDTO(ContractModel):
    overall: int
    speed: SpeedScoreDTO
    quality: QualityScoreDTO
    conversion: ConversionScoreDTO


class ThemeScoreDTO(ContractModel):
    overall: int
    score_source: str
    health_score: int
    breakdown: BreakdownDTO


class AnalyzeResponse(ContractModel):
    sections: List[SectionDTO]
    accessibility: AccessibilityReportDTO
    images: ImageReportDTO
    recommendations: List[RecommendationDTO]
    scores: ThemeScoreDTO
    section_status: Dict[str, str]
    problematic_sections: int
    analyzed_at: str


# ---------- Serialization helpers ----------

def _coerce_to_dict(obj: Any) -> Dict[str, Any]:
    if obj is None:
        return {}
    if is_dataclass(obj):
        return asdict(obj)
    return dict(obj)


def _dump(model: BaseModel) -> Dict[str, Any]:
    # optional fields that are unset are omitted rather than sent as null
    return model.model_dump(by_alias=True, exclude_none=True)


def to_contract(result: AnalysisResult) -> Dict[str, Any]:
    return _dump(AnalyzeResponse.model_validate(_coerce_to_dict(result)))


def recommendations_to_contract(recs: List[Recommendation]) -> List[Dict[str, Any]]:
    return [_dump(RecommendationDTO.model_validate(_coerce_to_dict(r))) for r in recs]


def accessibility_to_contract(report: AccessibilityReport) -> Dict[str, Any]:
    return _dump(AccessibilityReportDTO.model_validate(_coerce_to_dict(report)))


def images_to_contract(report: ImageReport) -> Dict[str, Any]:
    return _dump(ImageReportDTO.model_validate(_coerce_to_dict(report)))


def request_batch(sections: List[SectionInput]) -> List[Dict[str, str]]:
    return [{"name": s.name, "content": s.content} for s in sections]
