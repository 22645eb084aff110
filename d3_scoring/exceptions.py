"""Scoring errors"""
from typing import Any, Dict

from core.exceptions import NeuRazorError
from d2_formulas.exceptions import FormulaError


class ScoringError(NeuRazorError):
    """A competency formula failed while scoring a configuration"""

    def __init__(self, competency: str, cause: FormulaError, prefix: str = "Formula error in"):
        super().__init__(
            message=f"{prefix} {competency}: {cause.message}",
            error_code="SCORING_ERROR",
            details={"competency": competency, "kind": cause.error_code, "reason": cause.message},
            status_code=422,
        )
        self.competency = competency
        self.cause = cause

    def to_error_payload(self) -> Dict[str, Any]:
        """Per-formula error shape returned by interactive operations"""
        return {"competency": self.competency, "kind": self.cause.error_code, "message": self.cause.message}
