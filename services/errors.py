class ServiceError(Exception):
    """An external collaborator call failed. Surfaced to callers as a 500."""


class NotConfigured(ServiceError):
    pass


class UserNotFound(ServiceError):
    pass


class InvalidToken(ServiceError):
    pass
