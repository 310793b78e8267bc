import json
import math
from typing import Any, Dict, List, Optional
from pix3l.commands.models import Operation, OperationKind
from pix3l.core.constants import PROCESSING_CONSTANTS
from pix3l.core.validation import validate_float
from pix3l.features.suggestions.models import EnhancementAnalysis, EnhancementSuggestion
from pix3l.kernel.system.logging import get_logger

logger = get_logger(__name__)

# Suggestion names (lower case) to the adjustment they drive
SUGGESTION_KINDS: Dict[str, OperationKind] = {
    "brightness": OperationKind.BRIGHTNESS,
    "contrast": OperationKind.CONTRAST,
    "saturation": OperationKind.SATURATION,
    "hue": OperationKind.HUE,
    "gamma": OperationKind.GAMMA,
    "temperature": OperationKind.TEMPERATURE,
    "color_temperature": OperationKind.TEMPERATURE,
    "exposure": OperationKind.EXPOSURE,
    "shadows": OperationKind.SHADOWS,
    "highlights": OperationKind.HIGHLIGHTS,
    "sharpen": OperationKind.SHARPEN,
    "blur": OperationKind.BLUR,
}


def extract_json_object(text: str) -> str:
    """
    Returns the span from the first '{' to the last '}', or the text itself when there is none.
    """
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or start >= end:
        return text
    return text[start : end + 1]


def _parse_suggestion(entry: Any) -> Optional[EnhancementSuggestion]:
    if not isinstance(entry, dict):
        return None
    operation = entry.get("operation")
    operation = operation.strip() if isinstance(operation, str) else ""
    value = validate_float(entry.get("value"), 0.0)
    if not operation or value == 0.0 or not math.isfinite(value):
        return None
    reason = entry.get("reason")
    return EnhancementSuggestion(
        operation=operation,
        value=value,
        reason=reason if isinstance(reason, str) else "",
        confidence=max(0.0, min(1.0, validate_float(entry.get("confidence"), 0.0))),
        selected=True,
    )


def parse_suggestions(entries: Any) -> List[EnhancementSuggestion]:
    """
    Keeps well-formed entries with a name and a non-zero value; everything else is dropped.
    """
    if not isinstance(entries, list):
        return []
    parsed = (_parse_suggestion(e) for e in entries)
    return [s for s in parsed if s is not None]


def parse_enhancement_response(text: str) -> Optional[EnhancementAnalysis]:
    """
    Reads a suggestion payload that may be wrapped in prose or code fences.
    Returns None when no usable JSON object is found.
    """
    if not text:
        return None
    try:
        root = json.loads(extract_json_object(text))
    except json.JSONDecodeError as e:
        logger.warning(f"Enhancement response is not valid JSON: {e}")
        return None
    if not isinstance(root, dict):
        logger.warning("Enhancement response is not a JSON object")
        return None

    overall = root.get("overallAssessment")
    technical = root.get("technicalAnalysis")
    analysis = EnhancementAnalysis(
        overall_assessment=overall if isinstance(overall, str) else "",
        technical_analysis=technical if isinstance(technical, str) else "",
        suggestions=parse_suggestions(root.get("suggestions")),
    )
    return analysis if analysis.is_valid() else None


def create_fallback_analysis(description: str = "") -> EnhancementAnalysis:
    """
    Conservative unselected defaults shown when the suggestion provider fails.
    """
    return EnhancementAnalysis(
        overall_assessment=description or "Unable to analyze image automatically.",
        technical_analysis="Automatic analysis failed. Please adjust manually.",
        suggestions=[
            EnhancementSuggestion(
                "brightness", 10, "Default brightness adjustment", 0.5, False
            ),
            EnhancementSuggestion(
                "contrast", 10, "Default contrast adjustment", 0.5, False
            ),
        ],
    )


def suggestion_to_operation(suggestion: EnhancementSuggestion) -> Optional[Operation]:
    """
    Maps a suggestion to the operation it drives. Unknown names give None.
    """
    name = suggestion.operation.strip().lower()
    kind = SUGGESTION_KINDS.get(name)
    if kind is None:
        logger.warning(f"Unknown enhancement operation '{name}', skipping")
        return None

    if kind == OperationKind.SHARPEN:
        return Operation(kind)
    if kind == OperationKind.GAMMA:
        return Operation(kind, (float(suggestion.value),))
    if kind == OperationKind.BLUR:
        radius = max(
            1, min(PROCESSING_CONSTANTS["suggestion_blur_max"], int(suggestion.value))
        )
        return Operation(kind, (radius,))
    return Operation(kind, (int(suggestion.value),))


def suggestions_to_operations(
    suggestions: List[EnhancementSuggestion], selected_only: bool = True
) -> List[Operation]:
    ops = []
    for s in suggestions:
        if selected_only and not s.selected:
            continue
        op = suggestion_to_operation(s)
        if op is not None:
            ops.append(op)
    return ops
