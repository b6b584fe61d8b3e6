"""Report request I/O models."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import AnyHttpUrl, Field, TypeAdapter, ValidationError, field_validator

from ..domain.enums import ProjectPriority, ReportStatus, ReportType
from .base import CamelModel

_URL_ADAPTER = TypeAdapter(AnyHttpUrl)


class ReportCreate(CamelModel):
    type: ReportType
    title: str = Field(min_length=5)
    description: str = Field(min_length=20)
    project_name: str = Field(min_length=2)
    project_url: Optional[str] = Field(default=None, description="Project URL, or empty")
    deadline: Optional[str] = None
    priority: ProjectPriority = ProjectPriority.MEDIUM
    additional_notes: Optional[str] = None

    @field_validator("project_url")
    @classmethod
    def _url_or_empty(cls, value: Optional[str]) -> Optional[str]:
        if not value:
            return value
        try:
            _URL_ADAPTER.validate_python(value)
        except ValidationError as e:
            raise ValueError("Please enter a valid URL") from e
        return value


class ReportRead(CamelModel):
    id: str
    user_id: str
    type: str
    title: str
    description: str
    status: str
    file_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ReportCreateResponse(CamelModel):
    message: str
    report: ReportRead


class AdminReportUpdate(CamelModel):
    status: ReportStatus
    file_url: Optional[str] = None
