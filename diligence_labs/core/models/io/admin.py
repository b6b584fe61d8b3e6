"""
Admin back-office I/O models.

Covers admin authentication, registration keys, team and staff assignment
management, user management, notifications and the dashboard statistics.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import EmailStr, Field

from ..domain.enums import AccountStatus, AdminRole, AssignmentStatus, StaffRole, WorkItemType
from .auth import UserRead
from .base import CamelModel, Pagination


class AdminRead(CamelModel):
    id: str
    email: str
    name: str
    role: str
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime


class AdminSignupRequest(CamelModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=1)
    admin_key: str = Field(min_length=1)


class AdminSignupResponse(CamelModel):
    message: str
    admin: AdminRead


class AdminLoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class AdminLoginResponse(CamelModel):
    token: str
    admin: AdminRead


class AdminVerifyResponse(CamelModel):
    valid: bool
    admin: AdminRead


class AdminKeyCreate(CamelModel):
    expires_in_hours: Optional[int] = Field(default=None, gt=0)
    max_usages: Optional[int] = Field(default=None, gt=0)
    description: Optional[str] = Field(default=None, max_length=500)


class AdminKeyRead(CamelModel):
    id: str
    key: str
    description: Optional[str] = None
    is_active: bool
    expires_at: Optional[datetime] = None
    max_usages: Optional[int] = None
    usage_count: int
    created_by: Optional[str] = None
    last_used_at: Optional[datetime] = None
    created_at: datetime


class AdminKeyList(CamelModel):
    keys: List[AdminKeyRead]


class TeamMemberCreate(CamelModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=1)
    role: AdminRole = AdminRole.MODERATOR


class TeamMemberUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    role: Optional[AdminRole] = None
    is_active: Optional[bool] = None


class TeamMemberRead(AdminRead):
    open_assignments: int = 0
    assigned_hours: int = 0


class TeamStats(CamelModel):
    total_members: int
    active_members: int
    average_workload: int
    roles: Dict[str, int]


class TeamResponse(CamelModel):
    members: List[TeamMemberRead]
    stats: TeamStats


class TeamMemberResponse(CamelModel):
    message: str
    member: AdminRead


class StaffAssignmentCreate(CamelModel):
    item_id: str = Field(min_length=1)
    item_type: WorkItemType
    assignee_ids: List[str] = Field(min_length=1)
    role: StaffRole = StaffRole.LEAD
    estimated_hours: Optional[int] = Field(default=None, gt=0)


class StaffAssignmentUpdate(CamelModel):
    status: Optional[AssignmentStatus] = None
    actual_hours: Optional[int] = Field(default=None, ge=0)
    notes: Optional[str] = Field(default=None, max_length=2000)


class StaffMember(CamelModel):
    id: str
    name: str
    email: str
    role: str


class StaffAssignmentRead(CamelModel):
    id: str
    item_id: str
    item_type: str
    item_title: Optional[str] = None
    assignee: Optional[StaffMember] = None
    role: str
    status: str
    estimated_hours: Optional[int] = None
    actual_hours: Optional[int] = None
    notes: Optional[str] = None
    created_at: datetime
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class StaffAssignmentList(CamelModel):
    assignments: List[StaffAssignmentRead]


class StaffAssignmentCreateResponse(CamelModel):
    message: str
    assignments: List[StaffAssignmentRead]


class PendingWorkItem(CamelModel):
    id: str
    type: str
    title: str
    kind: str
    description: Optional[str] = None
    status: str
    requested_by: Optional[str] = None
    created_at: datetime
    has_assignments: bool
    suggested_team_size: int
    suggested_hours: int


class PendingWorkStats(CamelModel):
    total_pending: int
    unassigned_items: int


class PendingWorkResponse(CamelModel):
    items: List[PendingWorkItem]
    stats: PendingWorkStats


class AdminUserRead(UserRead):
    failed_login_attempts: int
    account_locked_until: Optional[datetime] = None
    status_reason: Optional[str] = None
    status_changed_at: Optional[datetime] = None
    status_changed_by: Optional[str] = None
    free_consultation_used: bool


class AdminUserList(CamelModel):
    users: List[AdminUserRead]
    pagination: Pagination


class UserStatusUpdate(CamelModel):
    account_status: AccountStatus
    reason: Optional[str] = Field(default=None, max_length=1000)


class UserStatusUpdateResponse(CamelModel):
    message: str
    user: AdminUserRead
    email_sent: bool


class SendNotificationRequest(CamelModel):
    notification_type: Literal["subscription_status", "security_alert", "custom"]
    subject: Optional[str] = Field(default=None, max_length=200)
    message: Optional[str] = Field(default=None, max_length=5000)
    details: Dict[str, Any] = Field(default_factory=dict)


class SendNotificationResponse(CamelModel):
    message: str
    success: bool
    notification_type: str
    recipient: str


class ExpiryCheckRequest(CamelModel):
    days_to_check: List[int] = Field(default_factory=lambda: [30, 14, 7, 3, 1])
    test_mode: bool = False


class ExpiryNotificationResult(CamelModel):
    user_id: str
    email: str
    subscription_id: str
    days_remaining: int
    status: str
    error: Optional[str] = None


class ExpiryCheckSummary(CamelModel):
    subscriptions_checked: int
    notifications_sent: int
    errors: int


class ExpiryCheckResponse(CamelModel):
    test_mode: bool
    summary: ExpiryCheckSummary
    notifications: List[ExpiryNotificationResult]


class ExpiringSubscription(CamelModel):
    subscription_id: str
    user_id: str
    user_email: str
    user_name: Optional[str] = None
    plan_type: str
    current_period_end: datetime
    days_remaining: int
    is_urgent: bool
    is_critical: bool


class ExpiringSummary(CamelModel):
    total: int
    urgent: int
    critical: int


class ExpiringSubscriptionsResponse(CamelModel):
    subscriptions: List[ExpiringSubscription]
    summary: ExpiringSummary


class NotificationLogRead(CamelModel):
    id: str
    user_id: str
    admin_id: Optional[str] = None
    notification_type: str
    subject: str
    recipient_email: str
    days_remaining: Optional[int] = None
    success: bool
    created_at: datetime


class NotificationHistoryResponse(CamelModel):
    notifications: List[NotificationLogRead]
    pagination: Pagination


class AdminStats(CamelModel):
    total_users: int
    sessions_by_status: Dict[str, int]
    reports_by_status: Dict[str, int]
    active_subscriptions: int
    projects_by_status: Dict[str, int]
    verified_experts: int
    total_rewards_distributed: float
