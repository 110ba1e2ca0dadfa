"""
Main entry point for the BuildTrack API.
"""

import uvicorn
from .config.settings import get_settings


def main():
    """Start the BuildTrack API server."""
    settings = get_settings()

    uvicorn.run(
        "buildtrack.core.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=False
    )


if __name__ == "__main__":
    main()
