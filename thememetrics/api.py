from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import FastAPI, HTTPException

from .config import configure_logging
from .contract import (
    AccessibilityRequest,
    AnalyzeRequest,
    ImagesRequest,
    RecommendationsRequest,
    accessibility_to_contract,
    images_to_contract,
    recommendations_to_contract,
    request_batch,
    to_contract,
)
from .models import InvalidBatchError
from .pipeline import audit_accessibility, audit_images, recommend, run_analysis

logger = logging.getLogger(__name__)

configure_logging()

# ---------- FastAPI application ----------

app = FastAPI(
    title="ThemeMetrics Engine API",
    version="1.0.0",
    description="Static analysis and scoring of storefront Liquid sections.",
)


def _dump_optional(model: Any) -> Any:
    return model.model_dump() if model is not None else None


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.post("/analyze")
def analyze(req: AnalyzeRequest) -> Dict[str, Any]:
    try:
        result = run_analysis(
            request_batch(req.sections),
            lab_metrics=_dump_optional(req.lab_metrics),
            monthly_revenue=req.monthly_revenue,
            theme=_dump_optional(req.theme),
            analyzed_at=req.analyzed_at,
        )
    except InvalidBatchError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return to_contract(result)


@app.post("/accessibility")
def accessibility(req: AccessibilityRequest) -> Dict[str, Any]:
    try:
        report = audit_accessibility(request_batch(req.sections))
    except InvalidBatchError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return accessibility_to_contract(report)


@app.post("/images")
def images(req: ImagesRequest) -> Dict[str, Any]:
    try:
        report = audit_images(request_batch(req.sections))
    except InvalidBatchError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return images_to_contract(report)


@app.post("/recommendations")
def recommendations(req: RecommendationsRequest) -> List[Dict[str, Any]]:
    try:
        recs = recommend(request_batch(req.sections), req.monthly_revenue)
    except InvalidBatchError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    logger.info("recommendations: %d for %d section(s)", len(recs), len(req.sections))
    return recommendations_to_contract(recs)
