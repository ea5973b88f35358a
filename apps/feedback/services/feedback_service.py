from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.core.validators import validate_email

from apps.accounts.application.services.identity_service import SessionIdentity
from apps.feedback.domain.errors import FeedbackNotFoundError, FeedbackValidationError
from apps.feedback.domain.types import MAX_MESSAGE_LENGTH, MAX_RATING, MIN_RATING, FeedbackCategory
from apps.feedback.models import Feedback

logger = logging.getLogger("consultdesk.feedback")


def _parse_rating(raw) -> int:
    if isinstance(raw, bool):
        raise FeedbackValidationError("Rating must be a whole number.", field="rating")
    try:
        rating = int(raw)
    except (TypeError, ValueError) as exc:
        raise FeedbackValidationError("Rating must be a whole number.", field="rating") from exc
    if not MIN_RATING <= rating <= MAX_RATING:
        raise FeedbackValidationError(f"Rating must be between {MIN_RATING} and {MAX_RATING}.", field="rating")
    return rating


def _parse_category(raw) -> FeedbackCategory:
    if raw in (None, ""):
        return FeedbackCategory.GENERAL
    try:
        return FeedbackCategory(str(raw).strip().lower())
    except ValueError as exc:
        raise FeedbackValidationError("Select a valid category.", field="category") from exc


class FeedbackService:
    @staticmethod
    def submit(*, user, identity: SessionIdentity, data) -> Feedback:
        """Name and e-mail fall back to the signed-in account when omitted."""
        rating = _parse_rating(data.get("rating"))
        category = _parse_category(data.get("category"))

        message = data.get("message")
        message = message.strip() if isinstance(message, str) else ""
        if not message:
            raise FeedbackValidationError("Message is required.", field="message")
        if len(message) > MAX_MESSAGE_LENGTH:
            raise FeedbackValidationError("Message is too long.", field="message")

        name = (data.get("name") or "").strip() or identity.display_name
        email = (data.get("email") or "").strip() or identity.email
        if not name:
            raise FeedbackValidationError("Name is required.", field="name")
        try:
            validate_email(email)
        except ValidationError as exc:
            raise FeedbackValidationError("Enter a valid e-mail address.", field="email") from exc

        feedback = Feedback.objects.create(
            user=user,
            name=name[:200],
            email=email,
            rating=rating,
            category=category.value,
            message=message,
        )
        logger.info("feedback_submitted", extra={"feedback_id": feedback.pk, "rating": rating})
        return feedback

    @staticmethod
    def list_all():
        return Feedback.objects.all()

    @staticmethod
    def delete(feedback_id: int) -> None:
        deleted, _ = Feedback.objects.filter(pk=feedback_id).delete()
        if not deleted:
            raise FeedbackNotFoundError()
        logger.info("feedback_deleted", extra={"feedback_id": feedback_id})
