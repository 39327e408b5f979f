from __future__ import annotations


class EventReportError(Exception):
    """Base class for errors raised by the document assembly engine."""


class ResourceLoadError(EventReportError):
    """An image or attachment could not be fetched or decoded.

    Always recoverable: the caller replaces the element with a placeholder node.
    """

    def __init__(self, ref: str, reason: str) -> None:
        super().__init__(f"{reason}: {ref}")
        self.ref = ref
        self.reason = reason


class DocumentBuildError(EventReportError):
    """The serializer could not turn the node tree into a document."""
