"""Error taxonomy for the cleansing pipeline."""


class CleansingError(Exception):
    """Base class for pipeline errors."""


class ConfigurationError(CleansingError, ValueError):
    """Invalid label sets, range bounds or run settings. Fatal at startup."""


class ClassifierError(CleansingError, RuntimeError):
    """Base class for failures at the classification service boundary."""


class ServiceUnavailableError(ClassifierError):
    """The classification/extraction service failed or timed out."""


class MalformedServiceResponse(ClassifierError):
    """The service answered, but not with something we can use."""

    def __init__(self, message: str, response_text: str = ""):
        super().__init__(message)
        self.response_text = response_text
