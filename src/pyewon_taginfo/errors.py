"""Clear exceptions for pyewon-taginfo: unbuilt registry, malformed export records, stream and config-write failures."""


class TagInfoError(Exception):
    """Base exception for pyewon-taginfo."""

    pass


class RegistryNotBuiltError(TagInfoError):
    """Raised when the registry is queried before a successful refresh."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or "Tag registry has not been built; call refresh() first")


class MalformedRecordError(TagInfoError):
    """Raised when an export record cannot be parsed into a tag descriptor."""

    def __init__(
        self,
        message: str,
        *,
        line: str | None = None,
        line_number: int | None = None,
    ) -> None:
        self.line = line
        self.line_number = line_number
        if line_number is not None:
            message = f"Line {line_number}: {message}"
        super().__init__(message)


class ExportStreamError(TagInfoError):
    """Raised when the tag-list export (or the tag count) cannot be read from its source."""

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        self.cause = cause
        super().__init__(message)


class ConfigWriteError(TagInfoError):
    """Raised when the configuration store fails to apply log settings to a tag."""

    def __init__(
        self,
        message: str,
        *,
        tag_name: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.tag_name = tag_name
        self.cause = cause
        super().__init__(message)
