"""
Pydantic models for Pagesmith.

All request/response shapes defined here. No imports from repos or routes.
"""

from backend.models.site import OutlineResponse, OutlineRow, PreviewRequest, PreviewSection

__all__ = [
    "PreviewRequest",
    "PreviewSection",
    "OutlineRow",
    "OutlineResponse",
]
