from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


ValidationLevel = Literal["warn", "fail"]


class ValidationIssue(BaseModel):
    field: str
    level: ValidationLevel
    message: str


class ValidationResult(BaseModel):
    status: Literal["ok", "warn", "fail"] = "ok"
    issues: list[ValidationIssue] = Field(default_factory=list)

    def summary(self) -> str:
        failing = [issue.message for issue in self.issues if issue.level == "fail"]
        return "; ".join(failing)
