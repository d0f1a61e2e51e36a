"""
Compliance Analysis Models

Structured output of the AI compliance analyzer. The analyzer is not
trusted blindly: scores are clamped, severities normalised and the total
fine is always recomputed from the violation list.
"""

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Literal


Severity = Literal['Low', 'Medium', 'High', 'Critical']

SEVERITY_ORDER = ['Low', 'Medium', 'High', 'Critical']


class Violation(BaseModel):
    """Single rule violation with its fine"""
    rule: str = "Unspecified violation"
    fine_amount: float = 0.0
    severity: Severity = 'Medium'
    description: str = ""

    @field_validator('fine_amount', mode='before')
    @classmethod
    def _non_negative_fine(cls, value):
        try:
            amount = float(value)
        except (TypeError, ValueError):
            return 0.0
        return max(0.0, amount)

    @field_validator('severity', mode='before')
    @classmethod
    def _normalise_severity(cls, value):
        if isinstance(value, str):
            for level in SEVERITY_ORDER:
                if value.strip().lower() == level.lower():
                    return level
        return 'Medium'

    @property
    def is_critical(self) -> bool:
        return self.severity == 'Critical'


class ComplianceResult(BaseModel):
    """
    Compliance report for one scan

    ``total_fine`` always equals the sum of ``violations[].fine_amount``;
    whatever total the analyzer reported is discarded.
    """
    risk_score: int = 0
    summary: str = ""
    violations: List[Violation] = Field(default_factory=list)
    total_fine: float = 0.0
    action_recommended: str = ""

    @field_validator('risk_score', mode='before')
    @classmethod
    def _clamp_risk_score(cls, value):
        try:
            score = int(round(float(value)))
        except (TypeError, ValueError):
            return 0
        return min(100, max(0, score))

    @model_validator(mode='after')
    def _recompute_total_fine(self):
        self.total_fine = sum(v.fine_amount for v in self.violations)
        return self

    @property
    def has_violations(self) -> bool:
        return len(self.violations) > 0

    def critical_violations(self) -> List[Violation]:
        """Violations with Critical severity, in analyzer order"""
        return [v for v in self.violations if v.is_critical]

    def violation_rules(self) -> List[str]:
        return [v.rule for v in self.violations]

    @classmethod
    def safe_default(cls, summary: str = "Error", action: str = "Manual") -> "ComplianceResult":
        """Zeroed result used when the analyzer response is empty or malformed"""
        return cls(risk_score=0, summary=summary, violations=[], action_recommended=action)
