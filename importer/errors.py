"""
MarkPort v1 - Import Errors

Exceptions raised by the import pipeline for whole-file problems.
Per-entry anomalies never raise; parsers drop those entries instead.
"""


class BookmarkImportError(Exception):
    """Base class for errors that reject an uploaded file as a whole."""

    message = "Import failed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)


class EmptyFileError(BookmarkImportError):
    """The uploaded file has no content."""

    message = "File is empty"


class UnrecognizedFormatError(BookmarkImportError):
    """The content matched none of the supported export formats."""

    message = "Unrecognized file format"
