"""Error taxonomy for the recipe generator."""


class OllamaNixError(RuntimeError):
    """Base class for generator failures. Every one of them ends the run."""


class ConfigError(OllamaNixError):
    """Raised when a required setting is missing or empty."""


class NetworkError(OllamaNixError):
    """Raised when the registry request cannot be issued or fails."""


class DecodeError(OllamaNixError):
    """Raised when the manifest body is not valid JSON of the expected shape."""


class EncodingError(OllamaNixError):
    """Raised when a digest string is not a valid sha256 hex digest."""


__all__ = [
    "OllamaNixError",
    "ConfigError",
    "NetworkError",
    "DecodeError",
    "EncodingError",
]
