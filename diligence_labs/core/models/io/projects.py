"""Project submission and expert assignment I/O models."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Field

from ..domain.enums import AssignmentType, ProjectPriority, ProjectStatus
from .base import CamelModel, Pagination
from .evaluations import EvaluationRead


class ProjectCreate(CamelModel):
    """Schema for submitting a project for evaluation."""

    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    category: str = Field(min_length=1)
    website: Optional[str] = None
    team_size: Optional[int] = Field(default=None, ge=0)
    blockchain: Optional[str] = None
    technology_stack: List[str] = Field(default_factory=list)
    smart_contract: Optional[str] = None
    repository: Optional[str] = None
    whitepaper: Optional[str] = None
    funding_raised: Optional[float] = Field(default=None, ge=0)
    user_base: Optional[int] = Field(default=None, ge=0)
    monthly_revenue: Optional[float] = Field(default=None, ge=0)
    evaluation_deadline: Optional[datetime] = None
    priority_level: ProjectPriority = ProjectPriority.MEDIUM
    evaluation_budget: Optional[float] = Field(default=None, ge=0)
    twitter_handle: Optional[str] = None
    linkedin_profile: Optional[str] = None
    discord_server: Optional[str] = None
    telegram_group: Optional[str] = None


class ProjectRead(CamelModel):
    id: str
    name: str
    description: str
    category: str
    website: Optional[str] = None
    team_size: Optional[int] = None
    blockchain: Optional[str] = None
    technology_stack: List[str]
    funding_raised: Optional[float] = None
    user_base: Optional[int] = None
    monthly_revenue: Optional[float] = None
    evaluation_deadline: Optional[datetime] = None
    priority_level: str
    evaluation_budget: Optional[float] = None
    submitter_id: str
    status: str
    overall_score: Optional[float] = None
    created_at: datetime

    @classmethod
    def from_entity(cls, project) -> "ProjectRead":
        data = project.model_dump()
        data["technology_stack"] = project.get_technology_stack_list()
        return cls.model_validate(data)


class MonthlyUsage(CamelModel):
    used: int
    limit: int
    remaining: int


class ProjectCreateResponse(CamelModel):
    message: str
    project: ProjectRead
    reputation_awarded: int
    monthly_usage: MonthlyUsage


class ProjectListItem(ProjectRead):
    evaluation_count: int = 0
    assignment_count: int = 0


class ProjectListResponse(CamelModel):
    projects: List[ProjectListItem]
    pagination: Pagination


class ProjectStatusUpdate(CamelModel):
    status: ProjectStatus


class AvailableProject(ProjectRead):
    is_assigned: bool
    has_evaluated: bool
    assignment_count: int
    available_slots: int
    evaluation_progress: int
    tier_compatible: bool
    expertise_match_score: int


class ExpertSummary(CamelModel):
    id: str
    tier: str
    verification_status: str
    reputation_points: int


class AvailableProjectsResponse(CamelModel):
    projects: List[AvailableProject]
    pagination: Pagination
    expert: ExpertSummary


class AssignProjectRequest(CamelModel):
    project_id: str = Field(min_length=1)
    assignment_type: AssignmentType = AssignmentType.PRIMARY
    estimated_hours: Optional[int] = Field(default=None, ge=1, le=200)
    specialization: Optional[str] = None


class AssignmentRead(CamelModel):
    id: str
    project_id: str
    expert_id: str
    assignment_type: str
    status: str
    estimated_hours: Optional[int] = None
    specialization: Optional[str] = None
    assigned_at: datetime
    accepted_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class AssignProjectResponse(CamelModel):
    message: str
    assignment: AssignmentRead
    reputation_awarded: int


class UnassignProjectResponse(CamelModel):
    message: str
    remaining_assignments: int


class OtherExpert(CamelModel):
    expert_id: str
    name: Optional[str] = None
    expert_tier: str
    assignment_type: str


class ProjectProgress(CamelModel):
    total_experts: int
    submitted_evaluations: int
    percent_complete: int


class MyAssignment(AssignmentRead):
    project: ProjectRead
    evaluation: Optional[EvaluationRead] = None
    has_evaluated: bool
    evaluation_status: str
    days_on_project: int
    other_experts: List[OtherExpert]
    project_progress: ProjectProgress


class MyAssignmentsResponse(CamelModel):
    assignments: List[MyAssignment]
    pagination: Pagination
    stats: Dict[str, int]
