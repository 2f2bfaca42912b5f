"""Exception types raised by the planner and its collaborators."""


class PlannerError(Exception):
    """Base class for study planner errors."""


class FormatError(PlannerError):
    """A time string could not be parsed."""


class ValidationError(PlannerError):
    """A planning request or stored update was rejected."""


class ExportError(PlannerError):
    """Calendar export could not run.

    ``credential`` is set when the failure comes from missing or unrefreshable
    credentials, which aborts the whole batch.
    """

    def __init__(self, message: str, credential: bool = False):
        super().__init__(message)
        self.credential = credential


class PlanNotFound(LookupError):
    pass


class PlanItemNotFound(LookupError):
    pass


class SubjectNotFound(LookupError):
    pass
