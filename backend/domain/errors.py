"""
Errors surfaced by the face service to the HTTP layer.

Anything deriving from FaceServiceError maps to a server-side failure.
An unsupported or missing skin is not an error: the service quietly falls
back to a default atlas.
"""


class FaceServiceError(Exception):
    """Base class for failures that abort a face request."""


class ProfileLookupError(FaceServiceError):
    """The identity service was unreachable or returned something unusable."""


class EncodeError(FaceServiceError):
    """The rendered face could not be encoded."""


class RegionBoundsError(AssertionError):
    """A pixel outside a texture region was read; the layout table is wrong."""
