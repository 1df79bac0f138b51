class WdrillError(Exception):
    """Base class for errors raised by the drilling engine and its host."""


class ConfigurationError(WdrillError):
    """The pair list cannot be used to start a session."""


class EmptyListError(ConfigurationError):
    def __init__(self, message: str = "A session needs at least one word pair."):
        super().__init__(message)


class InvalidInputError(WdrillError):
    """Input that does not apply to the current session state.

    Raising it never mutates the session.
    """


class NotFoundError(WdrillError):
    """Unknown word list or session."""


class PersistenceWarning(UserWarning):
    """Recording a finished session failed. Logged, never raised to the learner."""
