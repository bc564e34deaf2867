# src/snapsource/errors.py


class SnapSourceError(Exception):
    """Base class for every error raised by snapsource."""


class ConfigurationError(SnapSourceError):
    """A configuration value is out of range or of the wrong kind."""


class NoInputPathsError(SnapSourceError):
    def __init__(self, message: str = "Please select one or more files or folders."):
        super().__init__(message)


class RootResolutionError(SnapSourceError):
    """The traversal root is missing or does not contain the inputs."""


class OperationCancelled(SnapSourceError):
    def __init__(self, message: str = "Operation cancelled"):
        super().__init__(message)
