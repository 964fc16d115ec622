"""Exceptions raised by the episode-to-video pipeline."""


class Podcast2VideoError(Exception):
    """Base exception for all podcast2video errors.

    The pipeline sets ``stage`` to the step that failed so callers get
    context without the error changing class.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        self.stage: str | None = None

    def __str__(self) -> str:
        if self.stage:
            return f"{self.stage}: {self.message}"
        return self.message


class FetchError(Podcast2VideoError):
    """A feed or audio asset could not be retrieved."""

    def __init__(self, source: str, reason: object) -> None:
        super().__init__(f"could not get {source}: {reason}")
        self.source = source


class ParseError(Podcast2VideoError):
    """The feed document is malformed."""

    pass


class NotFoundError(Podcast2VideoError):
    """No episode in the feed carries the requested number."""

    def __init__(self, number: int) -> None:
        super().__init__(f"could not find episode {number}")
        self.number = number


class InvalidInputError(Podcast2VideoError):
    """Bad rendering input: color, dimensions, logo or template."""

    pass


class EncodingError(Podcast2VideoError):
    """The external encoder failed to produce a video."""

    def __init__(self, message: str, output: str = "") -> None:
        super().__init__(f"{message}\n{output.strip()}" if output.strip() else message)
        self.output = output


class WorkspaceError(Podcast2VideoError):
    """The temporary workspace could not be created or written."""

    pass


class PublishError(Podcast2VideoError):
    """The publish collaborator failed."""

    pass
