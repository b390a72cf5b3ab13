from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional

from .models import InvalidBatchError, LabMetrics, SectionSource, ThemeContext

# Accept the asset shape ({key, value}) as well as the plain {name, content} pair
NAME_ALIASES = ["name", "filename", "key"]
CONTENT_ALIASES = ["content", "source", "value"]
LAB_METRIC_KEYS = ["lcp", "cls", "tbt", "fcp"]


def _first_key(item: Mapping[str, Any], aliases: List[str]) -> Optional[str]:
    for k in aliases:
        if k in item:
            return k
    return None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def coerce_section(item: Any, index: int) -> SectionSource:
    if isinstance(item, SectionSource):
        return item
    if not isinstance(item, Mapping):
        raise InvalidBatchError(f"item {index}: expected a mapping with name/content, got {type(item).__name__}")

    name_key = _first_key(item, NAME_ALIASES)
    content_key = _first_key(item, CONTENT_ALIASES)
    if name_key is None:
        raise InvalidBatchError(f"item {index}: missing required field 'name'")
    if content_key is None:
        raise InvalidBatchError(f"item {index} ({item[name_key]!r}): missing required field 'content'")

    name, content = item[name_key], item[content_key]
    if not isinstance(name, str):
        raise InvalidBatchError(f"item {index}: field 'name' must be a string, got {type(name).__name__}")
    if not isinstance(content, str):
        raise InvalidBatchError(f"item {index} ({name!r}): field 'content' must be a string, got {type(content).__name__}")
    return SectionSource(name=name, content=content)


def coerce_batch(raw: Any) -> List[SectionSource]:
    """Validate the ordered input batch; order is preserved (it drives above-the-fold rules)."""
    if raw is None:
        raise InvalidBatchError("batch is required (got None)")
    if isinstance(raw, (str, bytes)) or isinstance(raw, Mapping) or not isinstance(raw, Iterable):
        raise InvalidBatchError(f"batch must be a list of sections, got {type(raw).__name__}")
    return [coerce_section(item, i) for i, item in enumerate(raw)]


def coerce_lab_metrics(raw: Any) -> Optional[LabMetrics]:
    if raw is None or isinstance(raw, LabMetrics):
        return raw
    if not isinstance(raw, Mapping):
        raise InvalidBatchError(f"lab metrics must be a mapping, got {type(raw).__name__}")
    values = {}
    for k in LAB_METRIC_KEYS:
        v = raw.get(k)
        if v is None:
            values[k] = None
            continue
        if not _is_number(v) or v < 0:
            raise InvalidBatchError(f"lab metric '{k}' must be a non-negative number, got {v!r}")
        values[k] = float(v)
    return LabMetrics(**values)


def coerce_revenue(raw: Any) -> Optional[float]:
    if raw is None:
        return None
    if not _is_number(raw) or raw < 0:
        raise InvalidBatchError(f"monthlyRevenue must be a non-negative number, got {raw!r}")
    return float(raw)


def _check_count(value: Any, label: str) -> None:
    if value is not None and (not isinstance(value, int) or isinstance(value, bool) or value < 0):
        raise InvalidBatchError(f"{label} must be a non-negative integer, got {value!r}")


def coerce_theme_context(raw: Any) -> Optional[ThemeContext]:
    if raw is None or isinstance(raw, ThemeContext):
        return raw
    if not isinstance(raw, Mapping):
        raise InvalidBatchError(f"theme context must be a mapping, got {type(raw).__name__}")
    snippets = raw.get("snippets_count", raw.get("snippetsCount"))
    translations = raw.get("has_translations", raw.get("hasTranslations"))
    above_fold = raw.get("sections_above_fold", raw.get("sectionsAboveFold"))
    _check_count(snippets, "snippetsCount")
    if translations is not None and not isinstance(translations, bool):
        raise InvalidBatchError(f"hasTranslations must be a boolean, got {translations!r}")
    _check_count(above_fold, "sectionsAboveFold")
    return ThemeContext(snippets_count=snippets, has_translations=translations, sections_above_fold=above_fold)


def load_section_dir(path: str) -> List[SectionSource]:
    """Read every *.liquid file in a directory, sorted by filename."""
    root = Path(path)
    if not root.is_dir():
        raise InvalidBatchError(f"not a directory: {path}")
    return [
        SectionSource(name=p.name, content=p.read_text(encoding="utf-8"))
        for p in sorted(root.glob("*.liquid"))
    ]
