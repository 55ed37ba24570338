"""Error taxonomy for the documentation assistant."""


class DocAssistantError(Exception):
    """Base class for assistant errors."""


class SearchUnavailable(DocAssistantError):
    """Search index failed: network, timeout, non-success status or malformed payload."""


class GenerationUnavailable(DocAssistantError):
    """Text generation failed: network, timeout, non-success status or empty output."""


class InvalidQueryError(DocAssistantError):
    """Caller supplied a missing or oversized message."""


class EndpointNotFound(DocAssistantError):
    """No registered API endpoint matches the requested path."""
