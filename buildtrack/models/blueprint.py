"""
Blueprint analysis models.
"""

from typing import List, Optional
from pydantic import BaseModel


class BlueprintAnalysisRequest(BaseModel):
    """Request model for blueprint analysis."""
    image_base64: str = ""
    additional_prompt: Optional[str] = None
    mime_type: str = "image/jpeg"


class BlueprintAnalysisResponse(BaseModel):
    """Structured answer returned by the vision model."""
    analysis: str
    keywords: List[str] = []
    related_questions: List[str] = []
