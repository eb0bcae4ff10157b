"""
FastAPI user feedback service.

Provides REST API for ratings and comments on catalog records:
- /api/userfeedback - Create, list, get, delete and publish feedback
- /api/records/{uuid}/userfeedback[rating] - Per-record feedback and averages
- GET /health - Service health check
"""

from src.api.app import create_app

__all__ = ["create_app"]
