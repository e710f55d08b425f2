"""Error taxonomy shared by the services and mapped to HTTP by main.py."""


class ReportError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidArgument(ReportError):
    """Bad month, page or perPage value supplied by the caller."""

    status_code = 400


class UpstreamFetchFailure(ReportError):
    """Seed source unreachable, or returned a payload that is not a valid dataset."""


class StoreFailure(ReportError):
    """A query or write against the transaction store failed."""
