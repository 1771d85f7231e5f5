"""Error taxonomy for document resolution.

Every error carries the ``stage`` that failed (``resolution``, ``parse``,
``timeout`` or ``environment``) and the logical path being loaded, so a
caller can tell a missing entity apart from a broken configuration.
"""


class GeoDataError(Exception):
    stage = "resolution"

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path

    def to_dict(self) -> dict:
        return {"stage": self.stage, "path": self.path, "message": str(self)}


class NotFoundError(GeoDataError):
    """No candidate location yielded the document."""

    def __init__(
        self,
        message: str,
        path: str = "",
        candidates: list[str] | None = None,
        skipped: list[str] | None = None,
        environment: str = "",
    ):
        super().__init__(message, path)
        self.candidates = candidates or []
        self.skipped = skipped or []
        self.environment = environment

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update(
            candidates=self.candidates,
            skipped=self.skipped,
            environment=self.environment,
        )
        return data


class LoadTimeoutError(GeoDataError, TimeoutError):
    stage = "timeout"

    def __init__(self, message: str, path: str = "", timeout: float = 0.0):
        super().__init__(message, path)
        self.timeout = timeout


class ParseError(GeoDataError, ValueError):
    stage = "parse"


class EnvironmentMismatch(GeoDataError):
    """A strategy needs a capability the current host does not have."""

    stage = "environment"


class SourceUnavailableError(GeoDataError):
    """The network origin failed for a reason other than a missing document."""

    def __init__(self, message: str, path: str = "", status_code: int | None = None):
        super().__init__(message, path)
        self.status_code = status_code


class TimezoneNotFoundError(LookupError):
    pass
