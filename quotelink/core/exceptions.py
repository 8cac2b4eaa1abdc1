"""Exception taxonomy.

"Not found" is never an error here: the locator and the fragment store
report absence with ``None``. Only structural failures are raised.
"""


class QuoteLinkError(Exception):
    """Base class for application errors."""

    pass


class DocumentLoadError(QuoteLinkError):
    """Document could not be read.

    Fatal for the current document; nothing is indexed until a new one loads.
    """

    pass


class GenerationError(QuoteLinkError):
    """The generative service failed to produce a response."""

    pass


class MalformedResponseError(QuoteLinkError):
    """Structured output did not match the declared schema.

    The payload is discarded whole, never partially applied.
    """

    pass


class InvalidRequestError(QuoteLinkError):
    """User input was rejected before reaching the generator."""

    pass
