"""
Unit tests for ProjectService.
"""

from datetime import date, datetime

import pytest

from buildtrack.core.exceptions import (
    RecordNotFoundError,
    StorageUnavailableError,
    ValidationFailedError,
)
from buildtrack.models.project import MilestoneCreate, ProjectCreate, ProjectStatus, ProjectUpdate
from buildtrack.services.project_service import ProjectService


@pytest.fixture
def service(settings, storage, clock):
    return ProjectService(settings, storage=storage, clock=clock)


@pytest.fixture
def project(service):
    return service.create_project(ProjectCreate(
        client_name="Mabini Residence",
        location="Batangas",
        start_date=date(2024, 6, 1),
        target_deadline=date(2024, 12, 1),
    ))


def milestone(title, due=date(2024, 7, 1), **kwargs):
    return MilestoneCreate(title=title, due_date=due, **kwargs)


class TestProjects:
    """Test cases for project records."""

    def test_new_project_has_no_progress(self, project):
        assert project.progress == 0
        assert project.milestones == []
        assert project.status == ProjectStatus.PENDING

    def test_progress_store_named_after_client(self, service, project):
        assert service.tracker(project.id).name == "Mabini Residence"
        assert service.get_progress(project.id).name == "Mabini Residence"

    def test_update_checks_dates_against_stored_values(self, service, project):
        with pytest.raises(ValidationFailedError):
            service.update_project(project.id, ProjectUpdate(start_date=date(2025, 1, 1)))

        updated = service.update_project(project.id, ProjectUpdate(client_name="Mabini House", budget=1500000))
        assert updated.client_name == "Mabini House"
        assert updated.budget == 1500000
        assert updated.location == "Batangas"
        assert service.get_progress(project.id).name == "Mabini House"

    def test_status_and_delete(self, service, project):
        assert service.set_status(project.id, ProjectStatus.IN_PROGRESS).status == ProjectStatus.IN_PROGRESS
        service.delete_project(project.id)
        with pytest.raises(RecordNotFoundError):
            service.get_project(project.id)
        with pytest.raises(RecordNotFoundError):
            service.tracker(project.id)


class TestMilestones:
    """Test cases for milestones and derived progress."""

    def test_progress_follows_milestones(self, service, project):
        a = service.add_milestone(project.id, milestone("Excavation"))
        service.add_milestone(project.id, milestone("Footings"))
        service.add_milestone(project.id, milestone("Slab"))

        service.toggle_milestone(project.id, a.id)
        assert service.get_project(project.id).progress == 33

        progress = service.get_progress(project.id)
        assert (progress.completed, progress.total, progress.progress) == (1, 3, 33)

    def test_toggle_unknown_milestone_raises(self, service, project):
        with pytest.raises(RecordNotFoundError) as excinfo:
            service.toggle_milestone(project.id, "missing")
        assert excinfo.value.kind == "Milestone"

    def test_set_status_records_completion_time(self, service, project, clock):
        m = service.add_milestone(project.id, milestone("Roofing"))
        clock.advance(days=3)
        done = service.set_milestone_status(project.id, m.id, True)
        assert done.completed is True
        assert done.completed_at == datetime(2024, 6, 18, 9, 30)

        reopened = service.set_milestone_status(project.id, m.id, False)
        assert reopened.completed_at is None

    def test_milestone_created_completed(self, service, project, clock):
        m = service.add_milestone(project.id, milestone("Permit", completed=True))
        assert m.completed_at == clock.now
        assert service.get_progress(project.id).progress == 100

    def test_progress_change_touches_project(self, service, project, clock):
        clock.advance(hours=2)
        service.add_milestone(project.id, milestone("Walls"))
        assert service.projects.get(project.id).updated_at == datetime(2024, 6, 15, 11, 30)

    def test_deadlines(self, service, project):
        service.add_milestone(project.id, milestone("Late", due=date(2024, 6, 10)))
        done = service.add_milestone(project.id, milestone("Done", due=date(2024, 6, 1)))
        service.add_milestone(project.id, milestone("Next", due=date(2024, 6, 30)))
        service.toggle_milestone(project.id, done.id)

        result = service.upcoming_deadlines(project.id)
        assert [d.title for d in result.deadlines] == ["Late", "Next"]
        assert [d.overdue for d in result.deadlines] == [True, False]
        assert result.overdue_count == 1
        assert result.today == date(2024, 6, 15)

    def test_unknown_project(self, service):
        with pytest.raises(RecordNotFoundError):
            service.add_milestone("missing", milestone("X"))


class TestDocuments:
    """Test cases for project documents."""

    @pytest.mark.asyncio
    async def test_upload_and_delete(self, service, project, storage):
        document = await service.upload_document(project.id, "site plan.pdf", b"%PDF-1.4", "application/pdf")

        assert document.name == "site plan.pdf"
        assert document.blob_name.startswith(f"project_documents/{project.id}/site_plan-")
        assert document.blob_name.endswith(".pdf")
        assert document.url.endswith(document.blob_name)
        assert service.list_documents(project.id) == [document]

        await service.delete_document(project.id, document.id)
        assert service.list_documents(project.id) == []
        assert storage.deleted == [document.blob_name]

    @pytest.mark.asyncio
    async def test_rejects_bad_extension_and_empty_file(self, service, project):
        with pytest.raises(ValidationFailedError):
            await service.upload_document(project.id, "virus.exe", b"MZ")
        with pytest.raises(ValidationFailedError):
            await service.upload_document(project.id, "notes.txt", b"")

    @pytest.mark.asyncio
    async def test_rejects_oversized_file(self, service, project, settings):
        too_big = b"x" * (settings.max_document_size_bytes + 1)
        with pytest.raises(ValidationFailedError):
            await service.upload_document(project.id, "scan.pdf", too_big)

    @pytest.mark.asyncio
    async def test_blob_delete_failure_still_removes_record(self, service, project, storage):
        document = await service.upload_document(project.id, "bom.xlsx", b"data")
        storage.fail_deletes = True
        await service.delete_document(project.id, document.id)
        assert service.list_documents(project.id) == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("filename", ["plan.pdf", "front.png"])
    async def test_project_deleted_during_upload_removes_blob(self, service, project, storage, monkeypatch, filename):
        upload = storage.upload

        async def upload_then_delete_project(blob_name, content, content_type=None):
            url = await upload(blob_name, content, content_type)
            service.delete_project(project.id)
            return url

        monkeypatch.setattr(storage, "upload", upload_then_delete_project)
        action = service.set_cover_photo if filename.endswith(".png") else service.upload_document

        with pytest.raises(RecordNotFoundError):
            await action(project.id, filename, b"data")
        assert storage.blobs == {}
        assert len(storage.deleted) == 1

    @pytest.mark.asyncio
    async def test_unknown_document(self, service, project):
        with pytest.raises(RecordNotFoundError):
            await service.delete_document(project.id, "missing")

    @pytest.mark.asyncio
    async def test_cover_photo(self, service, project):
        updated = await service.set_cover_photo(project.id, "front.png", b"\x89PNG", "image/png")
        assert updated.image_url.startswith("https://blobs.test/container/project_covers/")

        with pytest.raises(ValidationFailedError):
            await service.set_cover_photo(project.id, "front.pdf", b"%PDF")

    @pytest.mark.asyncio
    async def test_without_storage(self, settings, clock):
        service = ProjectService(settings, storage=None, clock=clock)
        project = service.create_project(ProjectCreate(
            client_name="No Storage",
            location="Cebu",
            start_date=date(2024, 1, 1),
            target_deadline=date(2024, 2, 1),
        ))
        with pytest.raises(StorageUnavailableError):
            await service.upload_document(project.id, "plan.pdf", b"%PDF")
