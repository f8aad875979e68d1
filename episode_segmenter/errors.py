"""Exception classes for episode segmentation."""


class SegmentationError(Exception):
    """Base class for every failure raised by the segmentation engine."""


class MissingScreenplayError(SegmentationError):
    """Raised when an episode has no structured screenplay or no scenes."""


class InvalidScreenplayError(SegmentationError):
    """Raised when a screenplay cannot be turned into scenes at all."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class InvalidOptionsError(SegmentationError, ValueError):
    """Raised when segmentation options are not usable."""


class SegmentationInvariantError(SegmentationError):
    """Raised when the splitter stops making forward progress.

    This is a defect, not an input problem: retrying with the same input
    produces the same failure.
    """
