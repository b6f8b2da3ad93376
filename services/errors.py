class MissingClientAddressError(ValueError):
    """The client IP could not be determined; token audit fields need it."""

    def __init__(self, message="Failed to determine user due to inability to determine client IP address."):
        super().__init__(message)


class SignUpError(Exception):
    """Expected sign-up failure; the message is safe to return to the caller."""
