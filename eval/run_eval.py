"""
Lightweight regression checks for the ThemeMetrics engine.

Usage:
    python3 -m eval.run_eval                     # run every case in eval/cases
    python3 -m eval.run_eval --case foo          # run just foo.json
    python3 -m eval.run_eval --verbose           # echo extra diagnostics
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Tuple

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from thememetrics.contract import to_contract  # noqa
from thememetrics.models import InvalidBatchError  # noqa
from thememetrics.pipeline import run_analysis  # noqa

CASES_DIR = Path(__file__).resolve().parent / "cases"
PINNED_TIMESTAMP = "2024-01-01T00:00:00+00:00"


def _load_case(path: Path) -> Dict[str, Any]:
    with path.open(encoding="utf-8") as f:
        data = json.load(f)
    data.setdefault("name", path.stem)
    return data


def _issue_ids(report: Dict[str, Any]) -> List[str]:
    return [i["id"] for s in report.get("sections", []) for i in s.get("issues", [])]


def _evaluate_case(case: Dict[str, Any]) -> Tuple[List[str], Dict[str, Any]]:
    """Run the pipeline for a given case and collect human-friendly errors."""
    errors: List[str] = []
    try:
        result = to_contract(run_analysis(
            case["sections"],
            lab_metrics=case.get("labMetrics"),
            monthly_revenue=case.get("monthlyRevenue"),
            theme=case.get("theme"),
            analyzed_at=PINNED_TIMESTAMP,
        ))
    except InvalidBatchError as exc:
        errors.append(f"contract error: {exc}")
        return errors, {}

    rec_ids = [r["id"] for r in result["recommendations"]]
    issue_ids = _issue_ids(result["accessibility"])
    image_ids = _issue_ids(result["images"])
    info: Dict[str, Any] = {
        "types": {s["name"]: s["type"] for s in result["sections"]},
        "complexity": {s["name"]: s["complexityScore"] for s in result["sections"]},
        "recommendations": rec_ids,
        "issues": issue_ids,
        "image_issues": image_ids,
        "score": result["scores"]["overall"],
        "score_source": result["scores"]["scoreSource"],
        "a11y": result["accessibility"]["overallScore"],
        "images": result["images"]["score"],
    }
    expectations: Dict[str, Any] = case.get("expectations", {})

    for name, expected in (expectations.get("section_types") or {}).items():
        seen = info["types"].get(name)
        if seen != expected:
            errors.append(f"section '{name}' classified as {seen!r}, expected {expected!r}")

    for name, floor in (expectations.get("complexity_at_least") or {}).items():
        seen = info["complexity"].get(name, -1)
        if seen < floor:
            errors.append(f"section '{name}' complexity {seen} below {floor}")

    missing = [r for r in expectations.get("required_recommendations") or [] if r not in rec_ids]
    if missing:
        errors.append(f"missing recommendations: {', '.join(missing)}")

    unexpected = [r for r in expectations.get("forbidden_recommendations") or [] if r in rec_ids]
    if unexpected:
        errors.append(f"unexpected recommendations: {', '.join(unexpected)}")

    for prefix in expectations.get("required_issue_prefixes") or []:
        if not any(i.startswith(prefix) for i in issue_ids):
            errors.append(f"no accessibility issue starting with '{prefix}'")

    for prefix in expectations.get("required_image_issue_prefixes") or []:
        if not any(i.startswith(prefix) for i in image_ids):
            errors.append(f"no image issue starting with '{prefix}'")

    max_issues = expectations.get("max_issues")
    if isinstance(max_issues, int) and len(issue_ids) > max_issues:
        errors.append(f"expected <= {max_issues} accessibility issues, saw {len(issue_ids)}")

    source = expectations.get("score_source")
    if source and info["score_source"] != source:
        errors.append(f"score source {info['score_source']!r}, expected {source!r}")

    lo, hi = expectations.get("overall_between") or (0, 100)
    if not lo <= info["score"] <= hi:
        errors.append(f"overall score {info['score']} outside [{lo}, {hi}]")

    return errors, info


def _print_debug(info: Dict[str, Any]) -> None:
    """Pretty-print core signals to help validate failures."""
    if not info:
        return
    print("    types:", info.get("types"))
    print("    score:", info.get("score"), f"({info.get('score_source')})",
          "a11y:", info.get("a11y"), "images:", info.get("images"))
    recs = info.get("recommendations") or []
    print("    recommendations:", len(recs), recs[:6], "..." if len(recs) > 6 else "")
    issues = info.get("issues") or []
    print("    issues:", len(issues), issues[:6], "..." if len(issues) > 6 else "")
    image_issues = info.get("image_issues") or []
    print("    image issues:", len(image_issues), image_issues[:6], "..." if len(image_issues) > 6 else "")


def main() -> int:
    parser = argparse.ArgumentParser(description="Run small eval cases for the ThemeMetrics engine.")
    parser.add_argument(
        "--case",
        metavar="NAME",
        help="Run a single case (matches <NAME>.json inside eval/cases).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print extra diagnostics (always shown on failures).",
    )
    args = parser.parse_args()

    if not CASES_DIR.exists():
        print("No cases found. Add JSON files under eval/cases.", file=sys.stderr)
        return 1

    case_paths = sorted(CASES_DIR.glob("*.json"))
    if args.case:
        matches = [p for p in case_paths if p.stem == args.case]
        if not matches:
            print(f"Case '{args.case}' not found.", file=sys.stderr)
            return 1
        case_paths = matches

    overall_errors = 0
    for path in case_paths:
        case = _load_case(path)
        errors, info = _evaluate_case(case)
        if errors:
            overall_errors += 1
            print(f"[FAIL] {case['name']}")
            for err in errors:
                print(f"  - {err}")
            _print_debug(info)
        else:
            print(f"[PASS] {case['name']}")
            if args.verbose:
                _print_debug(info)

    return 1 if overall_errors else 0


if __name__ == "__main__":  # pragma: no cover - CLI entry
    raise SystemExit(main())
