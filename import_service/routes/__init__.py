"""
MarkPort v1 - Import Service Routes
"""

from .imports import router as import_router

__all__ = ["import_router"]
