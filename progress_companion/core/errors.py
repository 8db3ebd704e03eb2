"""Engine errors. Routes translate these to HTTP responses."""


class EngineError(Exception):
    """Base for errors the analytics engine surfaces to its callers."""


class MissingPrerequisite(EngineError):
    """No user (or other required record) exists yet."""


class MalformedUpstreamResponse(EngineError):
    """The vision provider returned text that holds no usable JSON object."""

    def __init__(self, message: str, raw: str = ""):
        super().__init__(message)
        self.raw = raw


class ScanNotFound(EngineError):
    """A requested scan does not exist for the current user."""
