from __future__ import annotations

from enum import StrEnum

MIN_RATING = 1
MAX_RATING = 5
MAX_MESSAGE_LENGTH = 2000


class FeedbackCategory(StrEnum):
    GENERAL = "general"
    SERVICE = "service"
    WEBSITE = "website"
    SUPPORT = "support"
    OTHER = "other"

    @classmethod
    def choices(cls) -> list[tuple[str, str]]:
        return [(member.value, member.value.title()) for member in cls]
