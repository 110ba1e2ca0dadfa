"""
FastAPI dependencies resolving the services owned by the running application.
"""

from fastapi import Request

from ..services.blueprint_analysis import BlueprintAnalysisService
from ..services.item_service import ItemService
from ..services.project_service import ProjectService
from ..services.quotation_service import QuotationService


def get_item_service(request: Request) -> ItemService:
    return request.app.state.item_service


def get_quotation_service(request: Request) -> QuotationService:
    return request.app.state.quotation_service


def get_project_service(request: Request) -> ProjectService:
    return request.app.state.project_service


def get_blueprint_service(request: Request) -> BlueprintAnalysisService:
    return request.app.state.blueprint_service
