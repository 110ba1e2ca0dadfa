"""
Project data models.
Defines request and response models for projects, their milestones and
uploaded documents.
"""

from datetime import date, datetime
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..core.progress import Milestone, ProgressSnapshot


class ProjectStatus(str, Enum):
    """Lifecycle status of a project."""
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class MilestoneCreate(BaseModel):
    """Request model for adding a milestone to a project."""
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1)
    due_date: date
    description: Optional[str] = None
    start_date: Optional[date] = None
    completed: bool = False

    @model_validator(mode="after")
    def check_dates(self) -> "MilestoneCreate":
        if self.start_date and self.start_date > self.due_date:
            raise ValueError("Milestone start date cannot be after its due date")
        return self


class MilestoneStatusUpdate(BaseModel):
    completed: bool


class MilestoneResponse(BaseModel):
    """Milestone as returned by the API."""
    id: str
    title: str
    due_date: date
    completed: bool
    description: Optional[str] = None
    start_date: Optional[date] = None
    completed_at: Optional[datetime] = None
    overdue: bool = False

    @classmethod
    def from_milestone(cls, milestone: Milestone, today: Optional[date] = None) -> "MilestoneResponse":
        return cls(
            id=milestone.id,
            title=milestone.title,
            due_date=milestone.due_date,
            completed=milestone.completed,
            description=milestone.description,
            start_date=milestone.start_date,
            completed_at=milestone.completed_at,
            overdue=milestone.is_overdue(today) if today else False,
        )


class ProjectDocument(BaseModel):
    """A file uploaded to a project."""
    id: str
    name: str
    url: str
    blob_name: str
    content_type: Optional[str] = None
    size: int = 0
    uploaded_at: datetime


class ProjectCreate(BaseModel):
    """Request model for creating a project."""
    model_config = ConfigDict(str_strip_whitespace=True)

    client_name: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    description: Optional[str] = None
    start_date: date
    target_deadline: date
    budget: float = Field(0.0, ge=0)
    expenses: float = Field(0.0, ge=0)

    @model_validator(mode="after")
    def check_dates(self) -> "ProjectCreate":
        if self.start_date > self.target_deadline:
            raise ValueError("Start date cannot be after target deadline")
        return self


class ProjectUpdate(BaseModel):
    """Partial update of project fields. Omitted fields keep their value."""
    model_config = ConfigDict(str_strip_whitespace=True)

    client_name: Optional[str] = Field(None, min_length=1)
    location: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    start_date: Optional[date] = None
    target_deadline: Optional[date] = None
    budget: Optional[float] = Field(None, ge=0)
    expenses: Optional[float] = Field(None, ge=0)


class ProjectStatusUpdate(BaseModel):
    status: ProjectStatus


class ProjectRecord(BaseModel):
    """Stored project record. Milestones live in the project's progress store."""
    id: str
    client_name: str
    location: str
    description: Optional[str] = None
    start_date: date
    target_deadline: date
    status: ProjectStatus = ProjectStatus.PENDING
    budget: float = 0.0
    expenses: float = 0.0
    image_url: Optional[str] = None
    documents: List[ProjectDocument] = []
    created_at: datetime
    updated_at: datetime


class ProjectResponse(ProjectRecord):
    """Project with its milestones and derived progress."""
    milestones: List[MilestoneResponse] = []
    progress: int = 0
    completed_milestones: int = 0
    total_milestones: int = 0

    @classmethod
    def build(cls, record: ProjectRecord, snapshot: ProgressSnapshot, today: Optional[date] = None) -> "ProjectResponse":
        return cls(
            **record.model_dump(),
            milestones=[MilestoneResponse.from_milestone(m, today) for m in snapshot.milestones],
            progress=snapshot.progress,
            completed_milestones=snapshot.completed_count,
            total_milestones=snapshot.total,
        )


class ProgressResponse(BaseModel):
    """Derived progress of a project."""
    project_id: str
    name: str
    progress: int
    completed: int
    total: int


class DeadlinesResponse(BaseModel):
    """Incomplete milestones ordered by due date."""
    project_id: str
    today: date
    deadlines: List[MilestoneResponse]
    overdue_count: int = 0


class DocumentUploadResponse(BaseModel):
    message: str
    document: ProjectDocument
    project_id: str
