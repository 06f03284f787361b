"""Exceptions raised by the page store and the wiki coordinator."""


class WikiError(Exception):
    """Base class for every failure surfaced to a client."""

    status_code = 500
    message = "The wiki could not complete this request."


class ConnectionFailure(WikiError):
    """The database could not supply a working connection."""


class SchemaInitFailure(WikiError):
    """The pages table could not be created at startup."""


class ConstraintViolation(WikiError):
    """A page with the same name already exists."""


class NotFound(WikiError):
    """No page matched the given identifier."""


class RenderFailure(WikiError):
    """Markdown conversion or template rendering failed."""


class ValidationFailure(WikiError):
    """A required form field is missing or malformed."""


class Timeout(WikiError):
    """A pooled connection or a statement did not complete in time."""
