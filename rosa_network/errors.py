"""
Error types for network resource provisioning.
"""


class NetworkResourcesError(Exception):
    """Base class for all errors raised by rosa-network."""

    pass


class ValidationError(NetworkResourcesError):
    """Raised when user input or a template fails local validation."""

    pass


class NotFoundError(NetworkResourcesError):
    """Raised when a referenced template or file does not exist."""

    def __init__(self, message: str, path: str = None):
        super().__init__(message)
        self.path = path


class TemplateReadError(NotFoundError, IOError):
    """Raised when a template body cannot be read from disk."""

    pass


class ProviderError(NetworkResourcesError):
    """Raised when the cloud provider rejects a request or a stack rolls back.

    The message is the provider's own diagnostic, unmodified.
    """

    def __init__(self, message: str, code: str = None):
        super().__init__(message)
        self.code = code


class StackTimeoutError(NetworkResourcesError, TimeoutError):
    """Raised when a stack does not reach a terminal state in time."""

    def __init__(self, message: str, stack_name: str = None, last_status: str = None):
        super().__init__(message)
        self.stack_name = stack_name
        self.last_status = last_status
