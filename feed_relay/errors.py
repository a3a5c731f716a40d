"""Error taxonomy for the feed relay."""


class RelayError(Exception):
    """Base class for failures that abort a single tick."""

    kind = "relay_error"


class FetchError(RelayError):
    """The feed document could not be retrieved."""

    kind = "fetch_error"


class ParseError(RelayError):
    """The feed document could not be parsed."""

    kind = "parse_error"


class HistoryLookupError(RelayError):
    """The destination channel history could not be read."""

    kind = "history_lookup_error"


class DeliveryError(RelayError):
    """The gateway rejected an announcement."""

    kind = "delivery_error"

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class TickTimeoutError(RelayError):
    """The tick ran past its deadline before a step could start."""

    kind = "tick_timeout"
