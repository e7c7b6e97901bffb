"""Exceptions raised by the quiz core."""


class QuizError(Exception):
    pass


class EmptyQuestionSet(QuizError):
    """The requested filters left no question to draw."""


class InvalidSessionData(QuizError):
    """A saved session payload does not have the expected shape."""


class InvalidTransition(QuizError):
    """The operation is not allowed in the session's current state or mode."""


class StoreError(QuizError):
    """The persistent store could not be read or written."""
