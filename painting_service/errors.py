"""
errors.py — Error Taxonomy for the Painting Order Workflow

Every failure the workflow can surface is an `OrderWorkflowError`. Each error
carries an HTTP status code and a stable error code so the API layer can turn
it into a response without knowing the individual classes.

Categories:
    - ValidationError: local, raised before any collaborator is contacted.
    - Unauthenticated / AuthenticationFailed: identity gate failures.
    - CollaboratorUnavailable: catalog, identity or order store failures.
    - GenerationFailed: the preview service did not return an image.

None of these are fatal; the in-memory draft is always preserved.
"""


class OrderWorkflowError(Exception):
    """Base class for all painting order workflow errors."""

    status_code = 500
    error_code = "INTERNAL_ERROR"

    def __init__(self, message: str, status_code: int = None, error_code: str = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if error_code is not None:
            self.error_code = error_code
        super().__init__(message)


# --- Local validation ---
class ValidationError(OrderWorkflowError):
    status_code = 422
    error_code = "VALIDATION_ERROR"


class InvalidInput(ValidationError):
    error_code = "INVALID_INPUT"


class EmptyPrompt(ValidationError):
    error_code = "EMPTY_PROMPT"

    def __init__(self, message: str = "Either an AI prompt or customer notes are required to generate a preview."):
        super().__init__(message)


class MissingStyle(ValidationError):
    error_code = "MISSING_STYLE"

    def __init__(self, message: str = "A painting style must be selected before submitting."):
        super().__init__(message)


class StepError(ValidationError):
    error_code = "INVALID_STEP"


class WizardClosed(ValidationError):
    status_code = 409
    error_code = "WIZARD_CLOSED"


class PreviewInProgress(ValidationError):
    status_code = 409
    error_code = "PREVIEW_IN_PROGRESS"

    def __init__(self, message: str = "A preview is already being generated."):
        super().__init__(message)


class SubmitInProgress(ValidationError):
    status_code = 409
    error_code = "SUBMIT_IN_PROGRESS"

    def __init__(self, message: str = "The order is already being submitted."):
        super().__init__(message)


# --- Identity ---
class Unauthenticated(OrderWorkflowError):
    status_code = 401
    error_code = "UNAUTHENTICATED"

    def __init__(self, message: str = "Please sign in first."):
        super().__init__(message)


class AuthenticationFailed(OrderWorkflowError):
    status_code = 401
    error_code = "AUTHENTICATION_FAILED"


# --- Collaborators ---
class CollaboratorUnavailable(OrderWorkflowError):
    status_code = 503
    error_code = "COLLABORATOR_UNAVAILABLE"


class CatalogUnavailable(CollaboratorUnavailable):
    error_code = "CATALOG_UNAVAILABLE"


class IdentityUnavailable(CollaboratorUnavailable):
    error_code = "IDENTITY_UNAVAILABLE"


class OrderPersistFailed(CollaboratorUnavailable):
    status_code = 502
    error_code = "ORDER_PERSIST_FAILED"


class GenerationFailed(OrderWorkflowError):
    status_code = 502
    error_code = "GENERATION_FAILED"


class WizardNotFound(OrderWorkflowError):
    status_code = 404
    error_code = "WIZARD_NOT_FOUND"
