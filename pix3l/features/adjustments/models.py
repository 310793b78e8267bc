import math
from dataclasses import dataclass, asdict, fields, replace
from typing import Any, Dict
from pix3l.core.constants import PROCESSING_CONSTANTS
from pix3l.core.validation import validate_float, validate_int

GAMMA_MIN = 0.1
GAMMA_MAX = 10.0


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


@dataclass(frozen=True)
class AdjustmentParameters:
    """
    The nine tonal adjustment magnitudes. Identity is every field at zero and gamma at 1.0.
    Values are clamped into their ranges on construction.
    """

    brightness: int = 0
    contrast: int = 0
    saturation: int = 0
    hue: int = 0
    gamma: float = 1.0
    temperature: int = 0
    exposure: int = 0
    shadows: int = 0
    highlights: int = 0

    def __post_init__(self) -> None:
        for name in (
            "brightness",
            "contrast",
            "saturation",
            "temperature",
            "exposure",
            "shadows",
            "highlights",
        ):
            object.__setattr__(
                self, name, _clamp(validate_int(getattr(self, name)), -100, 100)
            )
        object.__setattr__(self, "hue", _clamp(validate_int(self.hue), -180, 180))
        gamma = validate_float(self.gamma, 1.0)
        if not math.isfinite(gamma):
            gamma = 1.0
        object.__setattr__(self, "gamma", max(GAMMA_MIN, min(GAMMA_MAX, gamma)))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AdjustmentParameters):
            return NotImplemented
        return (
            self.brightness == other.brightness
            and self.contrast == other.contrast
            and self.saturation == other.saturation
            and self.hue == other.hue
            and abs(self.gamma - other.gamma) <= PROCESSING_CONSTANTS["gamma_tolerance"]
            and self.temperature == other.temperature
            and self.exposure == other.exposure
            and self.shadows == other.shadows
            and self.highlights == other.highlights
        )

    # Near-equality on gamma makes exact hashing impossible
    __hash__ = None  # type: ignore[assignment]

    @property
    def gamma_is_identity(self) -> bool:
        return is_identity_gamma(self.gamma)

    def has_any_adjustment(self) -> bool:
        return (
            self.brightness != 0
            or self.contrast != 0
            or self.saturation != 0
            or self.hue != 0
            or not self.gamma_is_identity
            or self.temperature != 0
            or self.exposure != 0
            or self.shadows != 0
            or self.highlights != 0
        )

    @classmethod
    def reset(cls) -> "AdjustmentParameters":
        return cls()

    def with_values(self, **changes: Any) -> "AdjustmentParameters":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AdjustmentParameters":
        """
        Builds parameters from a flat dict. Unknown keys, None values and
        values that are not finite numbers are ignored.
        """
        kwargs: Dict[str, Any] = {}
        for f in fields(cls):
            if data.get(f.name) is None:
                continue
            value = validate_float(data[f.name], math.nan)
            if not math.isfinite(value):
                continue
            kwargs[f.name] = value if f.name == "gamma" else round(value)
        return cls(**kwargs)


def is_identity_gamma(gamma: float) -> bool:
    return abs(gamma - 1.0) <= PROCESSING_CONSTANTS["gamma_tolerance"]
