"""Expert evaluation I/O models."""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from ..domain.enums import Recommendation
from .base import CamelModel, Pagination


class EvaluationSubmit(CamelModel):
    """Schema for saving a draft evaluation or submitting it.

    Each of the six sections carries a 0-10 score and an optional comment.
    """

    project_id: str = Field(min_length=1)

    team_score: Optional[float] = Field(default=None, ge=0, le=10)
    team_comments: Optional[str] = Field(default=None, max_length=1000)
    pmf_score: Optional[float] = Field(default=None, ge=0, le=10)
    pmf_comments: Optional[str] = Field(default=None, max_length=1000)
    infrastructure_score: Optional[float] = Field(default=None, ge=0, le=10)
    infrastructure_comments: Optional[str] = Field(default=None, max_length=1000)
    status_score: Optional[float] = Field(default=None, ge=0, le=10)
    status_comments: Optional[str] = Field(default=None, max_length=1000)
    competitive_score: Optional[float] = Field(default=None, ge=0, le=10)
    competitive_comments: Optional[str] = Field(default=None, max_length=1000)
    risk_score: Optional[float] = Field(default=None, ge=0, le=10)
    risk_comments: Optional[str] = Field(default=None, max_length=1000)

    overall_score: Optional[float] = Field(default=None, ge=0, le=10)
    overall_comments: Optional[str] = Field(default=None, max_length=2000)
    recommendation: Optional[Recommendation] = None
    confidence_level: Optional[float] = Field(default=None, ge=0, le=1)
    submit: bool = False


class EvaluationRead(CamelModel):
    id: str
    project_id: str
    expert_id: str
    team_score: Optional[float] = None
    team_comments: Optional[str] = None
    pmf_score: Optional[float] = None
    pmf_comments: Optional[str] = None
    infrastructure_score: Optional[float] = None
    infrastructure_comments: Optional[str] = None
    status_score: Optional[float] = None
    status_comments: Optional[str] = None
    competitive_score: Optional[float] = None
    competitive_comments: Optional[str] = None
    risk_score: Optional[float] = None
    risk_comments: Optional[str] = None
    overall_score: Optional[float] = None
    overall_comments: Optional[str] = None
    recommendation: Optional[str] = None
    confidence_level: Optional[float] = None
    status: str
    submitted_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class EvaluationSaveResponse(CamelModel):
    message: str
    evaluation: EvaluationRead


class EvaluationListResponse(CamelModel):
    evaluations: List[EvaluationRead]
    pagination: Pagination


class EvaluationReviewRequest(CamelModel):
    decision: Literal["APPROVED", "REJECTED"]


class EvaluationReviewResponse(CamelModel):
    message: str
    evaluation: EvaluationRead
    project_status: str
    project_overall_score: Optional[float] = None
