"""
Project, assignment and evaluation repository.

This module provides the queries behind the expert workflow: listing
assignable projects in priority order, counting assignment slots, and
looking up an expert's assignments and evaluations.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import case, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from ..entities.experts import ExpertProfile
from ..entities.projects import Project, ProjectAssignment, ProjectEvaluation
from ..entities.users import User
from .base import AsyncBaseRepository

ACTIVE_ASSIGNMENT_STATUSES = ("ASSIGNED", "IN_PROGRESS")

_PRIORITY_ORDER = case(
    (Project.priority_level == "URGENT", 3),
    (Project.priority_level == "HIGH", 2),
    (Project.priority_level == "MEDIUM", 1),
    else_=0,
)


class ProjectRepository(AsyncBaseRepository[Project]):
    """Repository for the project evaluation workflow."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Project)

    async def list_projects(
        self,
        statuses: Optional[Sequence[str]] = None,
        category: Optional[str] = None,
        submitter_id: Optional[str] = None,
        limit: int = 10,
        offset: int = 0,
        by_priority: bool = False,
    ) -> Tuple[List[Project], int]:
        """List projects with optional filters.

        Args:
            statuses: Restrict to these statuses
            category: Restrict to a category
            submitter_id: Restrict to one submitter's projects
            limit: Page size
            offset: Rows to skip
            by_priority: Order by priority (URGENT first) before recency

        Returns:
            Tuple of the page of projects and the total matching count
        """
        conditions = []
        if statuses:
            conditions.append(col(Project.status).in_(list(statuses)))
        if category:
            conditions.append(Project.category == category)
        if submitter_id:
            conditions.append(Project.submitter_id == submitter_id)

        stmt = select(Project).where(*conditions)
        count_stmt = select(func.count()).select_from(Project).where(*conditions)

        if by_priority:
            stmt = stmt.order_by(_PRIORITY_ORDER.desc(), col(Project.created_at).desc())
        else:
            stmt = stmt.order_by(col(Project.created_at).desc())
        stmt = stmt.offset(offset).limit(limit)

        projects = list((await self.session.execute(stmt)).scalars().all())
        total = int((await self.session.execute(count_stmt)).scalar_one())
        return projects, total

    # -----------------------------------------------------------------
    # Assignments
    # -----------------------------------------------------------------

    async def get_assignment(self, project_id: str, expert_id: str) -> Optional[ProjectAssignment]:
        stmt = select(ProjectAssignment).where(
            (ProjectAssignment.project_id == project_id) & (ProjectAssignment.expert_id == expert_id)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_assignments(self, project_id: str) -> List[ProjectAssignment]:
        stmt = select(ProjectAssignment).where(ProjectAssignment.project_id == project_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_assignments(self, project_id: str) -> int:
        stmt = select(func.count()).select_from(ProjectAssignment).where(ProjectAssignment.project_id == project_id)
        return int((await self.session.execute(stmt)).scalar_one())

    async def assignment_counts(self, project_ids: Iterable[str]) -> Dict[str, int]:
        """Number of assignments per project, for the given projects."""
        ids = list(project_ids)
        if not ids:
            return {}
        stmt = (
            select(ProjectAssignment.project_id, func.count())
            .where(col(ProjectAssignment.project_id).in_(ids))
            .group_by(ProjectAssignment.project_id)
        )
        rows = (await self.session.execute(stmt)).all()
        return {project_id: int(count) for project_id, count in rows}

    async def count_active_assignments(self, expert_id: str) -> int:
        stmt = (
            select(func.count())
            .select_from(ProjectAssignment)
            .where(
                (ProjectAssignment.expert_id == expert_id)
                & col(ProjectAssignment.status).in_(ACTIVE_ASSIGNMENT_STATUSES)
            )
        )
        return int((await self.session.execute(stmt)).scalar_one())

    async def assigned_project_ids(self, expert_id: str) -> set[str]:
        stmt = select(ProjectAssignment.project_id).where(ProjectAssignment.expert_id == expert_id)
        return set((await self.session.execute(stmt)).scalars().all())

    async def list_expert_assignments(
        self, expert_id: str, status: Optional[str], limit: int, offset: int
    ) -> Tuple[List[Tuple[ProjectAssignment, Project]], int]:
        """An expert's assignments joined with their projects, newest first."""
        conditions = [ProjectAssignment.expert_id == expert_id]
        if status:
            conditions.append(ProjectAssignment.status == status)

        stmt = (
            select(ProjectAssignment, Project)
            .join(Project, Project.id == ProjectAssignment.project_id)
            .where(*conditions)
            .order_by(col(ProjectAssignment.assigned_at).desc())
            .offset(offset)
            .limit(limit)
        )
        count_stmt = select(func.count()).select_from(ProjectAssignment).where(*conditions)

        rows = [(row[0], row[1]) for row in (await self.session.execute(stmt)).all()]
        total = int((await self.session.execute(count_stmt)).scalar_one())
        return rows, total

    async def list_assignment_experts(
        self, project_id: str
    ) -> List[Tuple[ProjectAssignment, ExpertProfile, User]]:
        """A project's assignments with the assigned expert's profile and user."""
        stmt = (
            select(ProjectAssignment, ExpertProfile, User)
            .join(ExpertProfile, ExpertProfile.id == ProjectAssignment.expert_id)
            .join(User, User.id == ExpertProfile.user_id)
            .where(ProjectAssignment.project_id == project_id)
            .order_by(col(ProjectAssignment.assigned_at))
        )
        return [(row[0], row[1], row[2]) for row in (await self.session.execute(stmt)).all()]

    async def assignment_status_counts(self, expert_id: str) -> Dict[str, int]:
        stmt = (
            select(ProjectAssignment.status, func.count())
            .where(ProjectAssignment.expert_id == expert_id)
            .group_by(ProjectAssignment.status)
        )
        rows = (await self.session.execute(stmt)).all()
        return {status: int(count) for status, count in rows}

    # -----------------------------------------------------------------
    # Evaluations
    # -----------------------------------------------------------------

    async def get_evaluation(self, project_id: str, expert_id: str) -> Optional[ProjectEvaluation]:
        stmt = select(ProjectEvaluation).where(
            (ProjectEvaluation.project_id == project_id) & (ProjectEvaluation.expert_id == expert_id)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_evaluations(
        self, project_id: Optional[str] = None, statuses: Optional[Sequence[str]] = None
    ) -> List[ProjectEvaluation]:
        stmt = select(ProjectEvaluation)
        if project_id:
            stmt = stmt.where(ProjectEvaluation.project_id == project_id)
        if statuses:
            stmt = stmt.where(col(ProjectEvaluation.status).in_(list(statuses)))
        stmt = stmt.order_by(col(ProjectEvaluation.created_at).desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def submitted_evaluation_counts(self, project_ids: Iterable[str]) -> Dict[str, int]:
        """Number of evaluations past the draft stage per project."""
        ids = list(project_ids)
        if not ids:
            return {}
        stmt = (
            select(ProjectEvaluation.project_id, func.count())
            .where(col(ProjectEvaluation.project_id).in_(ids) & (ProjectEvaluation.status != "DRAFT"))
            .group_by(ProjectEvaluation.project_id)
        )
        rows = (await self.session.execute(stmt)).all()
        return {project_id: int(count) for project_id, count in rows}

    async def submitted_project_ids(self, expert_id: str) -> set[str]:
        """Projects the expert has submitted (non-draft) evaluations for."""
        stmt = select(ProjectEvaluation.project_id).where(
            (ProjectEvaluation.expert_id == expert_id) & (ProjectEvaluation.status != "DRAFT")
        )
        return set((await self.session.execute(stmt)).scalars().all())
