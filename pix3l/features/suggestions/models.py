from dataclasses import dataclass, field
from typing import List


@dataclass
class EnhancementSuggestion:
    """
    One externally proposed adjustment, e.g. {"operation": "brightness", "value": 12}.
    """

    operation: str
    value: float
    reason: str = ""
    confidence: float = 0.0
    selected: bool = True


@dataclass
class EnhancementAnalysis:
    overall_assessment: str = ""
    technical_analysis: str = ""
    suggestions: List[EnhancementSuggestion] = field(default_factory=list)

    def is_valid(self) -> bool:
        return bool(
            self.suggestions or self.overall_assessment or self.technical_analysis
        )

    def selected_suggestions(self) -> List[EnhancementSuggestion]:
        return [s for s in self.suggestions if s.selected]
