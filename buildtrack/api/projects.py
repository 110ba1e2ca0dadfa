"""
Project endpoints.
Handles projects, their milestones, derived progress, deadlines and documents.
"""

from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile

from ..core.exceptions import RecordNotFoundError, StorageError, StorageUnavailableError, ValidationFailedError
from ..models.project import (
    DeadlinesResponse,
    DocumentUploadResponse,
    MilestoneCreate,
    MilestoneResponse,
    MilestoneStatusUpdate,
    ProgressResponse,
    ProjectCreate,
    ProjectDocument,
    ProjectResponse,
    ProjectStatusUpdate,
    ProjectUpdate,
)
from ..services.project_service import ProjectService
from .dependencies import get_project_service

logger = structlog.get_logger(__name__)
router = APIRouter()


def _not_found(error: RecordNotFoundError) -> HTTPException:
    return HTTPException(status_code=404, detail=f"{error.kind} not found")


def _storage_failure(error: StorageError) -> HTTPException:
    if isinstance(error, StorageUnavailableError):
        return HTTPException(status_code=503, detail=str(error))
    return HTTPException(status_code=502, detail=str(error))


def _unexpected(action: str, error: Exception, **context) -> HTTPException:
    logger.error(f"Failed to {action}", error=str(error), error_type=type(error).__name__, **context)
    return HTTPException(status_code=500, detail=f"Failed to {action}: {str(error)}")


@router.get("", response_model=List[ProjectResponse])
async def list_projects(service: ProjectService = Depends(get_project_service)):
    try:
        return service.list_projects()
    except Exception as e:
        raise _unexpected("list projects", e)


@router.post("", response_model=ProjectResponse, status_code=201)
async def create_project(request: ProjectCreate, service: ProjectService = Depends(get_project_service)):
    """Create a project with an empty milestone list and 0% progress."""
    try:
        return service.create_project(request)
    except Exception as e:
        raise _unexpected("create project", e, client_name=request.client_name)


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(project_id: str, service: ProjectService = Depends(get_project_service)):
    try:
        return service.get_project(project_id)
    except RecordNotFoundError as e:
        raise _not_found(e)
    except Exception as e:
        raise _unexpected("get project", e, project_id=project_id)


@router.put("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: str,
    request: ProjectUpdate,
    service: ProjectService = Depends(get_project_service),
):
    try:
        return service.update_project(project_id, request)
    except RecordNotFoundError as e:
        raise _not_found(e)
    except ValidationFailedError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise _unexpected("update project", e, project_id=project_id)


@router.patch("/{project_id}/status", response_model=ProjectResponse)
async def update_project_status(
    project_id: str,
    request: ProjectStatusUpdate,
    service: ProjectService = Depends(get_project_service),
):
    try:
        return service.set_status(project_id, request.status)
    except RecordNotFoundError as e:
        raise _not_found(e)
    except Exception as e:
        raise _unexpected("update project status", e, project_id=project_id)


@router.delete("/{project_id}", status_code=204)
async def delete_project(project_id: str, service: ProjectService = Depends(get_project_service)):
    try:
        service.delete_project(project_id)
    except RecordNotFoundError as e:
        raise _not_found(e)
    except Exception as e:
        raise _unexpected("delete project", e, project_id=project_id)
    return Response(status_code=204)


# Milestones -----------------------------------------------------------


@router.get("/{project_id}/milestones", response_model=List[MilestoneResponse])
async def list_milestones(project_id: str, service: ProjectService = Depends(get_project_service)):
    """Milestones in the order they were added."""
    try:
        return service.list_milestones(project_id)
    except RecordNotFoundError as e:
        raise _not_found(e)
    except Exception as e:
        raise _unexpected("list milestones", e, project_id=project_id)


@router.post("/{project_id}/milestones", response_model=MilestoneResponse, status_code=201)
async def add_milestone(
    project_id: str,
    request: MilestoneCreate,
    service: ProjectService = Depends(get_project_service),
):
    try:
        return service.add_milestone(project_id, request)
    except RecordNotFoundError as e:
        raise _not_found(e)
    except Exception as e:
        raise _unexpected("add milestone", e, project_id=project_id)


@router.post("/{project_id}/milestones/{milestone_id}/toggle", response_model=MilestoneResponse)
async def toggle_milestone(
    project_id: str,
    milestone_id: str,
    service: ProjectService = Depends(get_project_service),
):
    try:
        return service.toggle_milestone(project_id, milestone_id)
    except RecordNotFoundError as e:
        raise _not_found(e)
    except Exception as e:
        raise _unexpected("toggle milestone", e, project_id=project_id, milestone_id=milestone_id)


@router.patch("/{project_id}/milestones/{milestone_id}", response_model=MilestoneResponse)
async def update_milestone_status(
    project_id: str,
    milestone_id: str,
    request: MilestoneStatusUpdate,
    service: ProjectService = Depends(get_project_service),
):
    try:
        return service.set_milestone_status(project_id, milestone_id, request.completed)
    except RecordNotFoundError as e:
        raise _not_found(e)
    except Exception as e:
        raise _unexpected("update milestone", e, project_id=project_id, milestone_id=milestone_id)


@router.get("/{project_id}/progress", response_model=ProgressResponse)
async def get_progress(project_id: str, service: ProjectService = Depends(get_project_service)):
    try:
        return service.get_progress(project_id)
    except RecordNotFoundError as e:
        raise _not_found(e)
    except Exception as e:
        raise _unexpected("get progress", e, project_id=project_id)


@router.get("/{project_id}/deadlines", response_model=DeadlinesResponse)
async def get_deadlines(
    project_id: str,
    limit: Optional[int] = Query(None, ge=1),
    service: ProjectService = Depends(get_project_service),
):
    """Incomplete milestones ordered by due date."""
    try:
        return service.upcoming_deadlines(project_id, limit)
    except RecordNotFoundError as e:
        raise _not_found(e)
    except Exception as e:
        raise _unexpected("get deadlines", e, project_id=project_id)


# Documents ------------------------------------------------------------


@router.get("/{project_id}/documents", response_model=List[ProjectDocument])
async def list_documents(project_id: str, service: ProjectService = Depends(get_project_service)):
    try:
        return service.list_documents(project_id)
    except RecordNotFoundError as e:
        raise _not_found(e)
    except Exception as e:
        raise _unexpected("list documents", e, project_id=project_id)


@router.post("/{project_id}/documents", response_model=DocumentUploadResponse, status_code=201)
async def upload_document(
    project_id: str,
    file: UploadFile = File(...),
    service: ProjectService = Depends(get_project_service),
):
    """Upload a project document to blob storage."""
    logger.info("Starting document upload", project_id=project_id, filename=file.filename)
    try:
        content = await file.read()
        document = await service.upload_document(project_id, file.filename, content, file.content_type)
    except RecordNotFoundError as e:
        raise _not_found(e)
    except ValidationFailedError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageError as e:
        raise _storage_failure(e)
    except Exception as e:
        raise _unexpected("upload document", e, project_id=project_id, filename=file.filename)

    return DocumentUploadResponse(
        message="Document uploaded successfully",
        document=document,
        project_id=project_id,
    )


@router.delete("/{project_id}/documents/{document_id}", response_model=ProjectResponse)
async def delete_document(
    project_id: str,
    document_id: str,
    service: ProjectService = Depends(get_project_service),
):
    try:
        return await service.delete_document(project_id, document_id)
    except RecordNotFoundError as e:
        raise _not_found(e)
    except Exception as e:
        raise _unexpected("delete document", e, project_id=project_id, document_id=document_id)


@router.patch("/{project_id}/image", response_model=ProjectResponse)
async def upload_cover_photo(
    project_id: str,
    cover_photo: UploadFile = File(...),
    service: ProjectService = Depends(get_project_service),
):
    """Replace the project's cover photo."""
    try:
        content = await cover_photo.read()
        return await service.set_cover_photo(project_id, cover_photo.filename, content, cover_photo.content_type)
    except RecordNotFoundError as e:
        raise _not_found(e)
    except ValidationFailedError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageError as e:
        raise _storage_failure(e)
    except Exception as e:
        raise _unexpected("update cover photo", e, project_id=project_id, filename=cover_photo.filename)
