from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_core import PydanticCustomError

from passport.utils.validation import validate_repository_submission

Verdict = Literal["approved", "rejected"]


class AnalyzeRequest(BaseModel):
    repoUrl: str

    @field_validator("repoUrl")
    @classmethod
    def validate_repo_url(cls, v: str) -> str:
        ok, error = validate_repository_submission(v)
        if not ok:
            raise PydanticCustomError("repo_url", error)
        return v.strip()


class AnalysisResult(BaseModel):
    verdict: Verdict
    details: str = ""
    strengths: list[str] = Field(default_factory=list)
    concerns: list[str] = Field(default_factory=list)


class AnalyzeResponse(BaseModel):
    owner: str
    repo: str
    verdict: Verdict
    details: str


class ErrorResponse(BaseModel):
    error: str
    code: str
    details: str | None = None
    retryable: bool | None = None
