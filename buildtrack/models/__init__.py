# Models Module
"""
Pydantic models for request/response validation.
"""

from .item import (
    Item,
    ItemCreate,
    ItemUpdate,
    ItemDeleteResponse
)

from .quotation import (
    Quotation,
    QuotationCreate,
    QuotationLine,
    QuotationDetail,
    QuotationLineDetail
)

from .project import (
    ProjectStatus,
    ProjectCreate,
    ProjectUpdate,
    ProjectStatusUpdate,
    ProjectRecord,
    ProjectResponse,
    ProjectDocument,
    MilestoneCreate,
    MilestoneStatusUpdate,
    MilestoneResponse,
    ProgressResponse,
    DeadlinesResponse,
    DocumentUploadResponse
)

from .blueprint import (
    BlueprintAnalysisRequest,
    BlueprintAnalysisResponse
)

__all__ = [
    # Item models
    "Item",
    "ItemCreate",
    "ItemUpdate",
    "ItemDeleteResponse",

    # Quotation models
    "Quotation",
    "QuotationCreate",
    "QuotationLine",
    "QuotationDetail",
    "QuotationLineDetail",

    # Project models
    "ProjectStatus",
    "ProjectCreate",
    "ProjectUpdate",
    "ProjectStatusUpdate",
    "ProjectRecord",
    "ProjectResponse",
    "ProjectDocument",
    "MilestoneCreate",
    "MilestoneStatusUpdate",
    "MilestoneResponse",
    "ProgressResponse",
    "DeadlinesResponse",
    "DocumentUploadResponse",

    # Blueprint models
    "BlueprintAnalysisRequest",
    "BlueprintAnalysisResponse"
]
