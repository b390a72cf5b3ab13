from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, List, Optional

from .accessibility import analyze_accessibility, generate_accessibility_report
from .features import analyze_section, count_problematic_sections, get_section_status
from .images import analyze_images, format_bytes, generate_image_report
from .loaders import coerce_batch, coerce_lab_metrics, coerce_revenue, coerce_theme_context
from .models import AccessibilityReport, AnalysisResult, ImageReport, Recommendation, Section
from .preprocess import section_name
from .rules_engine import generate_recommendations
from .scoring import score_theme

logger = logging.getLogger(__name__)


def analyze_sections(batch: Any) -> List[Section]:
    return [analyze_section(src.name, src.content) for src in coerce_batch(batch)]


def audit_accessibility(batch: Any) -> AccessibilityReport:
    reports = [analyze_accessibility(section_name(src.name), src.content) for src in coerce_batch(batch)]
    return generate_accessibility_report(reports)


def audit_images(batch: Any) -> ImageReport:
    reports = [analyze_images(section_name(src.name), src.content) for src in coerce_batch(batch)]
    return generate_image_report(reports)


def recommend(batch: Any, monthly_revenue: Any = None) -> List[Recommendation]:
    revenue = coerce_revenue(monthly_revenue)
    return generate_recommendations(analyze_sections(batch), revenue)


def run_analysis(batch: Any,
                 lab_metrics: Any = None,
                 monthly_revenue: Any = None,
                 theme: Any = None,
                 analyzed_at: Optional[str] = None) -> AnalysisResult:
    """
    Orchestrates one analysis run and returns an AnalysisResult:
      sections -> accessibility + image reports -> recommendations -> scores

    Everything except `analyzed_at` is a pure function of the inputs, so two
    runs over the same batch serialize identically once the timestamp is pinned.
    """
    # 1) Boundary validation (fails fast on contract violations)
    sources = coerce_batch(batch)
    lab = coerce_lab_metrics(lab_metrics)
    revenue = coerce_revenue(monthly_revenue)
    context = coerce_theme_context(theme)

    # 2) Per-section features + accessibility + images
    sections: List[Section] = []
    section_reports = []
    image_reports = []
    for src in sources:
        section = analyze_section(src.name, src.content)
        sections.append(section)
        report = analyze_accessibility(section.name, src.content)
        section_reports.append(report)
        images = analyze_images(section.name, src.content)
        image_reports.append(images)
        logger.debug("%s: type=%s complexity=%d load~%dms a11y=%d (%d issues) images=%d (%d issues)",
                     section.name, section.section_type, section.complexity_score,
                     section.estimated_load_time_ms, report.score, len(report.issues),
                     images.image_count, len(images.issues))

    # 3) Theme-level aggregation
    accessibility = generate_accessibility_report(section_reports)
    image_report = generate_image_report(image_reports)
    recommendations = generate_recommendations(sections, revenue)
    scores = score_theme(sections, lab, context, revenue)

    logger.info("analyzed %d section(s): score=%d (%s), a11y=%d, %d recommendation(s)",
                len(sections), scores.overall, scores.score_source,
                accessibility.overall_score, len(recommendations))
    logger.info("image score=%d, %d issue(s), ~%s saveable",
                image_report.score, image_report.issues_count, format_bytes(image_report.potential_savings))

    return AnalysisResult(
        sections=sections,
        accessibility=accessibility,
        images=image_report,
        recommendations=recommendations,
        scores=scores,
        section_status={s.name: get_section_status(s) for s in sections},
        problematic_sections=count_problematic_sections(sections),
        analyzed_at=analyzed_at or datetime.now(timezone.utc).isoformat(),
    )
