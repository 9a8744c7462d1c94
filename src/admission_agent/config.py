from dataclasses import dataclass
from typing import Optional, Tuple

from .exceptions import ConfigurationError


@dataclass
class AdmissionAgentConfig:
    # Core Paths
    catalog_dir: Optional[str] = None

    # Fuzzy resolution
    acceptance_threshold: float = 0.80
    min_similarity: float = 0.55
    ambiguity_margin: float = 0.05
    suggestion_limit: int = 3

    # Intent classification
    intent_min_score: float = 1.0

    # Net calculation
    default_safety_margin: float = 0.05
    scenario_margins: Tuple[float, ...] = (0.03, 0.05, 0.08)
    include_scenarios: bool = True
    max_achievable_score: float = 560.0
    base_points: float = 100.0
    diploma_points: float = 0.0
    narrow_spread: float = 20.0
    moderate_spread: float = 50.0

    # Conversation
    history_size: int = 5

    def __post_init__(self):
        for name in ("acceptance_threshold", "min_similarity", "ambiguity_margin"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ConfigurationError(f"{name} must be between 0.0 and 1.0, got {value}")
        if self.min_similarity > self.acceptance_threshold:
            raise ConfigurationError("min_similarity cannot exceed acceptance_threshold")
        if self.suggestion_limit < 1:
            raise ConfigurationError("suggestion_limit must be at least 1")
        if not 0.0 < self.default_safety_margin <= 1.0:
            raise ConfigurationError(
                f"default_safety_margin must be in (0, 1], got {self.default_safety_margin}"
            )
        if self.max_achievable_score <= self.base_points + self.diploma_points:
            raise ConfigurationError("max_achievable_score must exceed the fixed points")
        if self.narrow_spread > self.moderate_spread:
            raise ConfigurationError("narrow_spread cannot exceed moderate_spread")
        if self.history_size < 1:
            raise ConfigurationError("history_size must be at least 1")
        self.scenario_margins = tuple(self.scenario_margins)
