class CaptureError(RuntimeError):
    """Base class for capture pipeline failures."""


class InvalidSelectorError(CaptureError):
    """Raised by a document adapter when a selector cannot be parsed."""


class DomAccessError(CaptureError):
    """Raised by an element adapter when the underlying node cannot be read."""


class UnknownCaptureToken(CaptureError, KeyError):
    """Raised when an after-capture references a token that is not pending."""
