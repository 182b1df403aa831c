"""Exception types raised by the image reducer."""


class ImageReducerError(Exception):
    """Base class for image reducer failures."""


class ConfigError(ImageReducerError, ValueError):
    """Raised when run options are missing, unknown or out of range."""


class TransformError(ImageReducerError):
    """Raised when the transform engine cannot probe or write an image."""

    def __init__(self, path: str, message: str):
        super().__init__(f"{path}: {message}")
        self.path = path
