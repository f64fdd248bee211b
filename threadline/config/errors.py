"""Configuration error raised when required settings are missing."""


class ConfigurationError(Exception):
    """Raised when the service is missing credentials or endpoints.

    Operator-correctable. Raised while building collaborators, before
    any remote call is attempted.
    """

    def __init__(self, message: str, setting: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.setting = setting
