# checks/results.py

from dataclasses import dataclass


@dataclass(frozen=True)
class ScoreContribution:
    """Points achieved by one check out of the points it could have achieved."""

    achieved: int = 0
    maximum: int = 0

    def __post_init__(self):
        if self.achieved < 0 or self.maximum < 0:
            raise ValueError("score contributions cannot be negative")
        if self.achieved > self.maximum:
            raise ValueError(
                f"achieved score {self.achieved} exceeds maximum {self.maximum}"
            )

    def __add__(self, other):
        return ScoreContribution(
            self.achieved + other.achieved, self.maximum + other.maximum
        )

    def to_dict(self):
        return {"score": self.achieved, "max": self.maximum}


@dataclass(frozen=True)
class CheckResult:
    """Outcome of a single named check."""

    code: str
    contribution: ScoreContribution
    passed: bool = False
    message: str = ""

    @property
    def achieved(self):
        return self.contribution.achieved

    @property
    def maximum(self):
        return self.contribution.maximum

    def to_dict(self):
        return {
            "check": self.code,
            "score": self.achieved,
            "max": self.maximum,
            "passed": self.passed,
            "message": self.message,
        }
