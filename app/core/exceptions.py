class AnalyticsError(Exception):
    """Base class for errors raised by the analytics services."""


class CollaboratorNotFoundError(AnalyticsError, LookupError):
    def __init__(self, collaborator_id: str, reason: str = "Collaborator not found"):
        super().__init__(reason)
        self.collaborator_id = collaborator_id
        self.reason = reason


class InvalidComparisonError(AnalyticsError, ValueError):
    pass


class InvalidPillarError(AnalyticsError, ValueError):
    pass
