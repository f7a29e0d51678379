"""Exceptions raised by the tracker core."""


class NutrimindError(Exception):
    """Base error for the tracker."""


class GatewayError(NutrimindError):
    """The persistence gateway rejected or failed a request."""


class LoadError(NutrimindError):
    """The session's initial data load failed or returned no user."""


class SessionNotLoadedError(NutrimindError):
    """An operation needs data that has not been loaded yet."""


class GoalUpdateError(NutrimindError):
    """The gateway did not confirm a goal update."""
