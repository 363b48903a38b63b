"""Domain errors raised by services and translated to status codes in main."""


class KeyBuilderError(Exception):
    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__name__)
        self.message = message


class NotFoundError(KeyBuilderError):
    """A referenced key, revision or content entity does not exist or belongs elsewhere."""

    status_code = 404


class ConflictError(KeyBuilderError):
    """A uniqueness or state rule would be violated."""

    status_code = 409


class ForbiddenError(KeyBuilderError):
    status_code = 403


class ValidationFailedError(KeyBuilderError):
    """Input passed schema validation but is still unusable."""

    status_code = 400
