"""
Custom exceptions for LIMA Splitter.

This module defines all custom exceptions used throughout the library.
"""


class LimaSplitterException(Exception):
    """Base exception for all LIMA Splitter errors."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def default_message(self) -> str:
        return "An unknown splitter error occurred."


class InvalidPDFError(LimaSplitterException):
    """Raised when a PDF file cannot be loaded."""

    @property
    def default_message(self) -> str:
        return "Invalid or corrupted PDF file."


class PageWriteError(LimaSplitterException):
    """Raised when a split page cannot be written to disk."""

    @property
    def default_message(self) -> str:
        return "Unable to write split page."


class InputPathNotFoundError(LimaSplitterException):
    """Raised when the input path given to the batch processor does not exist."""

    @property
    def default_message(self) -> str:
        return "Input path not found."


class RenderBackendError(LimaSplitterException):
    """Raised when the external compression/rasterization tool fails."""

    @property
    def default_message(self) -> str:
        return "External render backend failed."


class PageOutOfBoundsError(LimaSplitterException):
    """Raised when requested page number is out of bounds."""

    @property
    def default_message(self) -> str:
        return "Requested page number is out of bounds."
