"""Exception hierarchy for Atelier.

Every error that crosses a module boundary derives from :class:`AtelierError`
so the HTTP layer can map it to a status code in one place.
"""


class AtelierError(Exception):
    """Base class for all Atelier errors.

    The message is intended to be displayed directly to the user.
    """

    pass


class DecodeError(AtelierError):
    """An image payload could not be decoded into a raster."""

    pass


class RemoteServiceError(AtelierError):
    """The remote generation service failed or returned unusable content."""

    pass


class TranslationError(AtelierError):
    """Translation failed. Never surfaced; callers fall back to the source text."""

    pass
