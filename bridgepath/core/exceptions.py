class ServiceError(Exception):
    """Failure talking to an outbound service."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class ServiceNotConfigured(ServiceError):
    """Credentials for an outbound service are missing."""


class OpenRouterError(ServiceError):
    pass


class PipedreamError(ServiceError):
    pass


class MCPError(ServiceError):
    pass
