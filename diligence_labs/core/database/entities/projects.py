"""
Project evaluation entity models.

This module contains the entities of the project evaluation workflow:

1. ``Project``: a submitted blockchain project awaiting expert review
2. ``ProjectAssignment``: an expert's slot on a project (at most 3 per project)
3. ``ProjectEvaluation``: the expert's scored evaluation of the project
"""

import json
from datetime import datetime
from typing import List, Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from ..base import Base, load_json_list, new_id, utc_now

EVALUATION_SECTIONS = ("team", "pmf", "infrastructure", "status", "competitive", "risk")


class ProjectBase(Base):
    """Base fields for a submitted project."""

    name: str
    description: str
    category: str = Field(index=True)
    website: Optional[str] = Field(default=None)
    team_size: Optional[int] = Field(default=None)
    blockchain: Optional[str] = Field(default=None)
    technology_stack: str = Field(default="[]", description="JSON array of technologies")
    smart_contract: Optional[str] = Field(default=None)
    repository: Optional[str] = Field(default=None)
    whitepaper: Optional[str] = Field(default=None)
    funding_raised: Optional[float] = Field(default=None)
    user_base: Optional[int] = Field(default=None)
    monthly_revenue: Optional[float] = Field(default=None)
    evaluation_deadline: Optional[datetime] = Field(default=None)
    priority_level: str = Field(default="MEDIUM")
    evaluation_budget: Optional[float] = Field(default=None)
    twitter_handle: Optional[str] = Field(default=None)
    linkedin_profile: Optional[str] = Field(default=None)
    discord_server: Optional[str] = Field(default=None)
    telegram_group: Optional[str] = Field(default=None)


class Project(ProjectBase, table=True):
    """Persistent submitted project.

    Table: projects
    """

    __tablename__ = "projects"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True)
    submitter_id: str = Field(foreign_key="users.id", index=True)
    status: str = Field(default="SUBMITTED", index=True)
    overall_score: Optional[float] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def get_technology_stack_list(self) -> List[str]:
        """Get technology stack as a list."""
        return load_json_list(self.technology_stack)

    def set_technology_stack_list(self, stack: List[str]) -> None:
        """Set technology stack from a list."""
        self.technology_stack = json.dumps(stack)

    def __repr__(self) -> str:
        return f"Project(id={self.id}, name={self.name}, status={self.status})"


class ProjectAssignment(Base, table=True):
    """An expert assigned to evaluate a project.

    Table: project_assignments
    """

    __tablename__ = "project_assignments"
    __table_args__ = (
        UniqueConstraint("project_id", "expert_id", name="uq_project_assignments_project_expert"),
        {"extend_existing": True},
    )

    id: str = Field(default_factory=new_id, primary_key=True)
    project_id: str = Field(foreign_key="projects.id", index=True)
    expert_id: str = Field(foreign_key="expert_profiles.id", index=True)
    assignment_type: str = Field(default="PRIMARY")
    status: str = Field(default="ASSIGNED", index=True)
    estimated_hours: Optional[int] = Field(default=None)
    specialization: Optional[str] = Field(default=None)
    assigned_at: datetime = Field(default_factory=utc_now)
    accepted_at: Optional[datetime] = Field(default=None)
    completed_at: Optional[datetime] = Field(default=None)

    def __repr__(self) -> str:
        return f"ProjectAssignment(project={self.project_id}, expert={self.expert_id}, status={self.status})"


class ProjectEvaluation(Base, table=True):
    """An expert's scored evaluation of a project.

    Each of the six sections carries a 0-10 score and a free-text comment.

    Table: project_evaluations
    """

    __tablename__ = "project_evaluations"
    __table_args__ = (
        UniqueConstraint("project_id", "expert_id", name="uq_project_evaluations_project_expert"),
        {"extend_existing": True},
    )

    id: str = Field(default_factory=new_id, primary_key=True)
    project_id: str = Field(foreign_key="projects.id", index=True)
    expert_id: str = Field(foreign_key="expert_profiles.id", index=True)
    assignment_id: Optional[str] = Field(default=None, foreign_key="project_assignments.id")

    team_score: Optional[float] = Field(default=None)
    team_comments: Optional[str] = Field(default=None)
    pmf_score: Optional[float] = Field(default=None)
    pmf_comments: Optional[str] = Field(default=None)
    infrastructure_score: Optional[float] = Field(default=None)
    infrastructure_comments: Optional[str] = Field(default=None)
    status_score: Optional[float] = Field(default=None)
    status_comments: Optional[str] = Field(default=None)
    competitive_score: Optional[float] = Field(default=None)
    competitive_comments: Optional[str] = Field(default=None)
    risk_score: Optional[float] = Field(default=None)
    risk_comments: Optional[str] = Field(default=None)

    overall_score: Optional[float] = Field(default=None)
    overall_comments: Optional[str] = Field(default=None)
    recommendation: Optional[str] = Field(default=None)
    confidence_level: Optional[float] = Field(default=None)

    status: str = Field(default="DRAFT", index=True)
    submitted_at: Optional[datetime] = Field(default=None)
    reviewed_at: Optional[datetime] = Field(default=None)
    reviewed_by: Optional[str] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def section_comments(self) -> List[Optional[str]]:
        return [getattr(self, f"{section}_comments") for section in EVALUATION_SECTIONS]

    def __repr__(self) -> str:
        return f"ProjectEvaluation(project={self.project_id}, expert={self.expert_id}, status={self.status})"
