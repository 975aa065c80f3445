"""
Moderation Services
===================

Keyword screening for messages and reviews. Screening never blocks
delivery: matching content is stored as a ContentFlag for moderators,
and admins are alerted right away for severity 4 and above.
"""

import re
from dataclasses import dataclass, field

from django.utils import timezone

from core.exceptions import ConflictError, ValidationError
from core.services import BaseService
from notifications.models import NotificationType
from notifications.services import NotificationService
from .models import ContentFlag
from .repositories import banned_keyword_repo, content_flag_repo

ADMIN_ALERT_SEVERITY = 4


@dataclass
class ContentCheck:
    is_flagged: bool = False
    matched_keywords: list = field(default_factory=list)
    reasons: list = field(default_factory=list)
    severity: int = 0


def keyword_pattern(keyword: str):
    """Whole word or phrase, case-insensitive, any run of spaces between words."""
    words = [re.escape(w) for w in keyword.lower().split()]
    return re.compile(r"\b" + r"\s+".join(words) + r"\b", re.IGNORECASE)


class ModerationService(BaseService):

    @classmethod
    def check_content(cls, text: str) -> ContentCheck:
        result = ContentCheck()
        if not text or not isinstance(text, str):
            return result

        banned_keyword_repo.seed_defaults()
        for keyword in banned_keyword_repo.active():
            if keyword_pattern(keyword.keyword).search(text):
                result.is_flagged = True
                result.matched_keywords.append(keyword.keyword)
                result.reasons.append(f"Contains banned keyword: {keyword.category}")
                result.severity = max(result.severity, keyword.severity)
        return result

    @classmethod
    def flag_content(cls, content_type: str, content_id, user, reason: str,
                     matched_keywords=None, severity: int = 0) -> ContentFlag:
        flag = content_flag_repo.create(
            content_type=content_type,
            content_id=str(content_id),
            user=user,
            flag_reason=reason,
            matched_keywords=list(matched_keywords or []),
            severity=severity,
        )
        cls.logger.warning(
            "Flagged %s %s from user %s: %s (severity %d)", content_type, content_id, user.pk, reason, severity,
        )
        if severity >= ADMIN_ALERT_SEVERITY:
            NotificationService.notify_admins(
                NotificationType.CONTENT_FLAGGED,
                "Content flagged for review",
                f"A {content_type} has been flagged for moderation: {reason}",
                {"flag_id": flag.pk, "content_type": content_type, "content_id": str(content_id)},
            )
        return flag

    @classmethod
    def moderate(cls, content_type: str, content_id, user, text: str):
        """Screen ``text``; returns the created flag or None."""
        check = cls.check_content(text)
        if not check.is_flagged:
            return None
        return cls.flag_content(
            content_type, content_id, user, ", ".join(check.reasons), check.matched_keywords, check.severity,
        )

    @classmethod
    def review_flag(cls, flag: ContentFlag, admin, status: str, admin_notes: str = "",
                    action_taken: str = "") -> ContentFlag:
        status = str(status)
        if status not in (ContentFlag.Status.REVIEWED, ContentFlag.Status.DISMISSED, ContentFlag.Status.ACTION_TAKEN):
            raise ValidationError(f"Unsupported review status: {status}", field="status")
        if flag.status != ContentFlag.Status.PENDING:
            raise ConflictError("This flag has already been reviewed", resource="content_flag")

        flag = content_flag_repo.update(
            flag,
            status=status,
            reviewed_by=admin,
            reviewed_at=timezone.now(),
            admin_notes=admin_notes,
            action_taken=action_taken,
        )

        if status == ContentFlag.Status.ACTION_TAKEN:
            title = "Content moderation notice"
            message = f"Your {flag.content_type} was reviewed and action has been taken"
            message += f": {action_taken}" if action_taken else "."
        elif status == ContentFlag.Status.DISMISSED:
            title = "Content review complete"
            message = f"Your {flag.content_type} was reviewed and the flag was dismissed. No issues were found."
        else:
            title = "Content review complete"
            message = f"Your {flag.content_type} was reviewed by our moderation team. No action was taken."
        NotificationService.send(
            flag.user, NotificationType.CONTENT_FLAGGED, title, message, {"link_url": "/notifications"},
        )
        return flag
