"""
MarkPort v1 - Import Service

FastAPI service that accepts bookmark export uploads and creates the new
bookmarks in a background job that clients poll for progress.
"""

__version__ = "1.0.0"
