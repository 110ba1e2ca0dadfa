"""
BuildTrack - Construction Project Management API

Items, quotations, projects with milestone-driven progress, project
documents in Azure Blob Storage, and blueprint analysis through a vision
model.
"""

__version__ = "1.0.0"

from .core.app import create_app

__all__ = ["create_app"]
