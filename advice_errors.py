"""
Error types for the legal advice assistant.

Only ConfigurationError and DecodeError ever reach the user as blocking
problems. ProviderError is surfaced with a retry option, and MalformedResponse
is absorbed by the response normalizer.
"""


class AdviceError(Exception):
    """Base class for all advice assistant errors"""


class ConfigurationError(AdviceError):
    """Gemini API key is missing or looks like a placeholder"""


class ProviderError(AdviceError):
    """The language model provider call did not succeed"""

    def __init__(self, message: str, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class DecodeError(AdviceError):
    """A stored session value could not be recovered by any decode path"""


class MalformedResponse(AdviceError):
    """Provider text is not the JSON object that was asked for"""
