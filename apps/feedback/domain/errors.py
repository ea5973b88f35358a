from __future__ import annotations


class FeedbackDomainError(ValueError):
    http_status = 400
    retryable = False

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.field = field


class FeedbackValidationError(FeedbackDomainError):
    pass


class FeedbackNotFoundError(FeedbackDomainError):
    http_status = 404

    def __init__(self, message: str = "Feedback not found.", *, field: str | None = "feedbackId"):
        super().__init__(message, field=field)
