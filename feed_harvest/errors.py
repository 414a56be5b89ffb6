"""Exception types raised by the harvest pipeline."""


class HarvestError(Exception):
    """Base class for harvest errors."""
    pass


class FetchError(HarvestError):
    """A feed or page could not be retrieved, or came back malformed."""

    def __init__(self, url: str, message: str):
        super().__init__(f"{url}: {message}")
        self.url = url
        self.message = message


class ParseError(HarvestError):
    """A fetched document could not be parsed into a traversable tree."""

    def __init__(self, url: str, message: str):
        super().__init__(f"{url}: {message}")
        self.url = url
        self.message = message


class OutputError(HarvestError):
    """Records or the report could not be written."""
    pass


class ConfigError(HarvestError):
    """The harvest configuration is missing or invalid."""
    pass
