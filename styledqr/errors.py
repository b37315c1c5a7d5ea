"""Exception types raised by the render pipeline."""


class RenderError(Exception):
    """Base class for every failure surfaced by a render call."""


class ConfigurationError(RenderError, ValueError):
    """Invalid render options, detected before any encoding or drawing."""


class CollaboratorError(RenderError):
    """A collaborator (symbol encoder, frame decoder/encoder) reported a failure.

    ``detail`` holds the collaborator's own diagnostic text.
    """

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(f"{message}: {detail}" if detail else message)
        self.detail = detail


class EncodingError(CollaboratorError):
    """The content could not be encoded into a QR symbol."""


class AnimationError(CollaboratorError):
    """Decoding, encoding or finalising an animated background failed."""
