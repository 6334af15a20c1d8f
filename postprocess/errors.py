"""Exceptions raised by the postprocessing pipeline.

All errors derive from ValueError so callers that guard on invalid input
the usual way keep working.
"""


class PostProcessError(ValueError):
    """Base class for postprocessing failures."""


class ConfigurationError(PostProcessError):
    """Unsupported model_name or invalid configuration values."""


class ShapeMismatchError(PostProcessError):
    """Tensor shape or image shape metadata does not fit the batch."""


class DegenerateGeometryError(PostProcessError):
    """A candidate box has no usable geometry (e.g. zero perimeter).

    Raised per candidate and handled by rejecting that candidate only.
    """
