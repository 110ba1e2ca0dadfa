"""
Project service.

Owns project records, one ``ProgressStore`` per project for its milestones,
and the project's uploaded files. This service is the only writer of the
progress stores; routers read through it.
"""

import os
from datetime import date, datetime
from typing import Callable, Dict, List, Optional

import structlog

from ..config.settings import Settings
from ..core.exceptions import RecordNotFoundError, StorageError, StorageUnavailableError, ValidationFailedError
from ..core.progress import Milestone, ProgressSnapshot, ProgressStore
from ..integrations.azure_storage import BlobDocumentStorage, build_blob_name
from ..models.project import (
    DeadlinesResponse,
    MilestoneCreate,
    MilestoneResponse,
    ProgressResponse,
    ProjectCreate,
    ProjectDocument,
    ProjectRecord,
    ProjectResponse,
    ProjectStatus,
    ProjectUpdate,
)
from .repository import InMemoryCollection, new_record_id

logger = structlog.get_logger(__name__)

DOCUMENT_EXTENSIONS = {
    ".jpeg", ".jpg", ".png", ".gif", ".pdf", ".doc", ".docx", ".xls", ".xlsx",
    ".txt", ".csv", ".zip", ".ppt", ".pptx", ".rar", ".7z",
}
IMAGE_EXTENSIONS = {".jpeg", ".jpg", ".png", ".webp"}


class ProjectService:
    """Projects, their milestones and documents."""

    def __init__(
        self,
        settings: Settings,
        storage: Optional[BlobDocumentStorage] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.settings = settings
        self.storage = storage
        self.clock = clock or datetime.utcnow
        self.projects: InMemoryCollection[ProjectRecord] = InMemoryCollection("Project")
        self._trackers: Dict[str, ProgressStore] = {}

    def today(self) -> date:
        return self.clock().date()

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def list_projects(self) -> List[ProjectResponse]:
        today = self.today()
        return [
            ProjectResponse.build(record, self.tracker(record.id).snapshot(), today)
            for record in self.projects.list()
        ]

    def get_project(self, project_id: str) -> ProjectResponse:
        record = self.projects.get(project_id)
        return ProjectResponse.build(record, self.tracker(project_id).snapshot(), self.today())

    def create_project(self, request: ProjectCreate) -> ProjectResponse:
        now = self.clock()
        record = ProjectRecord(id=new_record_id(), created_at=now, updated_at=now, **request.model_dump())
        self.projects.insert(record)

        tracker = ProgressStore(
            name=record.client_name,
            clock=self.clock,
        )
        tracker.subscribe(self._progress_listener(record.id))
        self._trackers[record.id] = tracker

        logger.info("Created project", project_id=record.id, client_name=record.client_name)
        return ProjectResponse.build(record, tracker.snapshot(), self.today())

    def update_project(self, project_id: str, request: ProjectUpdate) -> ProjectResponse:
        record = self.projects.get(project_id)
        changes = request.model_dump(exclude_unset=True, exclude_none=True)

        start_date = changes.get("start_date", record.start_date)
        target_deadline = changes.get("target_deadline", record.target_deadline)
        if start_date > target_deadline:
            raise ValidationFailedError("Start date cannot be after target deadline")

        record = self._save(record, **changes)
        self.tracker(project_id).rename(record.client_name)
        logger.info("Updated project", project_id=project_id, fields=sorted(changes))
        return self.get_project(project_id)

    def set_status(self, project_id: str, status: ProjectStatus) -> ProjectResponse:
        record = self.projects.get(project_id)
        self._save(record, status=status)
        logger.info("Updated project status", project_id=project_id, status=status.value)
        return self.get_project(project_id)

    def delete_project(self, project_id: str) -> None:
        self.projects.delete(project_id)
        self._trackers.pop(project_id, None)
        logger.info("Deleted project", project_id=project_id)

    # ------------------------------------------------------------------
    # Milestones and progress
    # ------------------------------------------------------------------

    def tracker(self, project_id: str) -> ProgressStore:
        try:
            return self._trackers[project_id]
        except KeyError:
            raise RecordNotFoundError("Project", project_id) from None

    def list_milestones(self, project_id: str) -> List[MilestoneResponse]:
        today = self.today()
        return [MilestoneResponse.from_milestone(m, today) for m in self.tracker(project_id).milestones]

    def add_milestone(self, project_id: str, request: MilestoneCreate) -> MilestoneResponse:
        tracker = self.tracker(project_id)
        milestone = Milestone(
            id=new_record_id(),
            title=request.title,
            due_date=request.due_date,
            completed=request.completed,
            description=request.description,
            start_date=request.start_date,
            completed_at=self.clock() if request.completed else None,
        )
        tracker.add_milestone(milestone)
        logger.info("Added milestone", project_id=project_id, milestone_id=milestone.id, progress=tracker.progress)
        return MilestoneResponse.from_milestone(milestone, self.today())

    def toggle_milestone(self, project_id: str, milestone_id: str) -> MilestoneResponse:
        tracker = self.tracker(project_id)
        if milestone_id not in tracker:
            raise RecordNotFoundError("Milestone", milestone_id)
        tracker.toggle_milestone(milestone_id)
        return MilestoneResponse.from_milestone(tracker.get_milestone(milestone_id), self.today())

    def set_milestone_status(self, project_id: str, milestone_id: str, completed: bool) -> MilestoneResponse:
        tracker = self.tracker(project_id)
        if milestone_id not in tracker:
            raise RecordNotFoundError("Milestone", milestone_id)
        tracker.set_completed(milestone_id, completed)
        return MilestoneResponse.from_milestone(tracker.get_milestone(milestone_id), self.today())

    def get_progress(self, project_id: str) -> ProgressResponse:
        snapshot = self.tracker(project_id).snapshot()
        return ProgressResponse(
            project_id=project_id,
            name=snapshot.name,
            progress=snapshot.progress,
            completed=snapshot.completed_count,
            total=snapshot.total,
        )

    def upcoming_deadlines(self, project_id: str, limit: Optional[int] = None) -> DeadlinesResponse:
        tracker = self.tracker(project_id)
        today = self.today()
        deadlines = [MilestoneResponse.from_milestone(m, today) for m in tracker.upcoming(limit)]
        return DeadlinesResponse(
            project_id=project_id,
            today=today,
            deadlines=deadlines,
            overdue_count=len(tracker.overdue(today)),
        )

    def _progress_listener(self, project_id: str) -> Callable[[ProgressSnapshot], None]:
        def on_change(snapshot: ProgressSnapshot) -> None:
            record = self.projects.find(project_id)
            if record is None:
                return
            self._save(record)
            logger.info(
                "Project progress changed",
                project_id=project_id,
                progress=snapshot.progress,
                completed=snapshot.completed_count,
                total=snapshot.total,
            )

        on_change.__name__ = f"project_progress_{project_id}"
        return on_change

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def upload_document(
        self, project_id: str, filename: str, content: bytes, content_type: Optional[str] = None
    ) -> ProjectDocument:
        record = self.projects.get(project_id)
        self._check_upload(filename, content, DOCUMENT_EXTENSIONS, self.settings.max_document_size_bytes)
        storage = self._require_storage()

        blob_name = build_blob_name(self.settings.documents_folder, project_id, filename)
        url = await storage.upload(blob_name, content, content_type)

        document = ProjectDocument(
            id=new_record_id(),
            name=filename,
            url=url,
            blob_name=blob_name,
            content_type=content_type,
            size=len(content),
            uploaded_at=self.clock(),
        )
        # Re-read: the record may have changed while the upload was awaited
        record = await self._reload_after_upload(project_id, blob_name)
        self._save(record, documents=[*record.documents, document])
        logger.info("Uploaded project document", project_id=project_id, document_id=document.id, filename=filename)
        return document

    def list_documents(self, project_id: str) -> List[ProjectDocument]:
        return list(self.projects.get(project_id).documents)

    async def delete_document(self, project_id: str, document_id: str) -> ProjectResponse:
        record = self.projects.get(project_id)
        document = next((d for d in record.documents if d.id == document_id), None)
        if document is None:
            raise RecordNotFoundError("Document", document_id)

        self._save(record, documents=[d for d in record.documents if d.id != document_id])
        logger.info("Deleted project document", project_id=project_id, document_id=document_id)

        await self._discard_blob(document.blob_name)
        return self.get_project(project_id)

    async def set_cover_photo(
        self, project_id: str, filename: str, content: bytes, content_type: Optional[str] = None
    ) -> ProjectResponse:
        self.projects.get(project_id)
        self._check_upload(filename, content, IMAGE_EXTENSIONS, self.settings.max_image_size_bytes)
        storage = self._require_storage()

        blob_name = build_blob_name(self.settings.covers_folder, project_id, filename)
        url = await storage.upload(blob_name, content, content_type)

        record = await self._reload_after_upload(project_id, blob_name)
        self._save(record, image_url=url)
        logger.info("Updated project cover photo", project_id=project_id, blob_name=blob_name)
        return self.get_project(project_id)

    async def _reload_after_upload(self, project_id: str, blob_name: str) -> ProjectRecord:
        """Re-read the project after an upload, removing the blob if the project is gone."""
        try:
            return self.projects.get(project_id)
        except RecordNotFoundError:
            logger.warning("Project deleted during upload", project_id=project_id, blob_name=blob_name)
            await self._discard_blob(blob_name)
            raise

    async def _discard_blob(self, blob_name: str) -> None:
        if self.storage is None:
            return
        try:
            await self.storage.delete(blob_name)
        except StorageError as e:
            logger.error("Failed to delete blob", blob_name=blob_name, error=str(e))

    def _require_storage(self) -> BlobDocumentStorage:
        if self.storage is None:
            raise StorageUnavailableError("Document storage is not configured")
        return self.storage

    @staticmethod
    def _check_upload(filename: str, content: bytes, allowed: set, max_size: int) -> None:
        extension = os.path.splitext(filename or "")[1].lower()
        if extension not in allowed:
            raise ValidationFailedError(
                f"File type {extension or '(none)'} not supported. Allowed: {', '.join(sorted(allowed))}"
            )
        if not content:
            raise ValidationFailedError("Uploaded file is empty")
        if len(content) > max_size:
            raise ValidationFailedError(f"File exceeds the {max_size // (1024 * 1024)} MB limit")

    def _save(self, record: ProjectRecord, **changes) -> ProjectRecord:
        updated = record.model_copy(update={**changes, "updated_at": self.clock()})
        return self.projects.replace(updated)
