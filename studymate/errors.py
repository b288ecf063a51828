"""Exception hierarchy shared by the services and mapped to HTTP responses in ``create_app``."""


class StudyMateError(Exception):
    status_code = 500
    public_message = "Something went wrong. Please try again."

    def __init__(self, message=None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class MissingInputError(StudyMateError):
    """Raised before any model call when the request carries nothing to work on."""
    status_code = 400


class RequestValidationError(StudyMateError):
    status_code = 400

    def __init__(self, message=None, details=None):
        super().__init__(message or "Invalid request.")
        self.details = details or []


class ProviderError(StudyMateError):
    """The model provider failed, timed out, or is not configured."""
    status_code = 502
    public_message = "The AI failed to respond. Please try again."


class InvalidModelJSONError(StudyMateError):
    """The model reply was not parseable JSON. Broken syntax is never repaired."""
    status_code = 502

    def __init__(self, feature, raw_text=""):
        super().__init__(f"The AI returned invalid JSON for {feature}. Please try again.")
        self.feature = feature
        self.raw_text = raw_text


class ResultValidationError(StudyMateError):
    """The normalized result still does not satisfy its schema."""
    status_code = 502

    def __init__(self, feature, reason):
        super().__init__(f"The AI returned an invalid {feature} result: {reason}")
        self.feature = feature
        self.reason = reason


class AuthError(StudyMateError):
    status_code = 401
    public_message = "Authentication required."


class NotFoundError(StudyMateError):
    status_code = 404
    public_message = "Not found."


class ConflictError(StudyMateError):
    status_code = 409
    public_message = "Already exists."
