"""Exception hierarchy for Zetascan lookups."""


class ZetascanError(Exception):
    """Base class for every error raised by the client."""


class ConfigurationError(ZetascanError, ValueError):
    """Invalid combination of configuration inputs."""


class MalformedRequestError(ZetascanError):
    """The provider answered 404, the request URL is malformed."""

    def __init__(self, url: str):
        super().__init__(f"Invalid request, check URL not malformed: {url}")
        self.url = url


class ForbiddenError(ZetascanError):
    """The provider answered 403, the key or source IP is not authorized."""

    def __init__(self, url: str):
        super().__init__(
            f"Request forbidden, check API key or IP for authorization: {url}"
        )
        self.url = url


class TransportFailure(ZetascanError):
    """Network or I/O failure, including DNS errors and exhausted retries."""


class DecodeFailure(ZetascanError):
    """A response body could not be decoded into a result."""
