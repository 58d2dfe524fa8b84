class OptimizeError(Exception):
    """Base class for errors that abort an optimize run."""


class ConfigError(OptimizeError):
    """Unknown option, bad option value, or unreadable config file."""


class SetupError(OptimizeError):
    """The run could not start: missing build directory or minifier failure."""


class ScanError(OptimizeError):
    """A file could not be scanned, so the manifest would be incomplete."""

    def __init__(self, path, error):
        self.path = path
        self.error = error
        super().__init__(f"{path}: {error}")
