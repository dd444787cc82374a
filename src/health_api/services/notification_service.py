"""Service for notifications and the reports they reference."""

from datetime import datetime, timezone
from functools import lru_cache
from uuid import UUID

from loguru import logger
from pydantic import ValidationError as PydanticValidationError
from sqlmodel import Session, select

from health_api.database import atomic
from health_api.exceptions import NotFoundError, ValidationError
from health_api.models.api_model import NotificationResponse, ReportResponse
from health_api.models.base_model import NotificationStatus, ReportStatus, notification_payload_adapter
from health_api.models.db_model import Notification, Report
from health_api.utils.model_converter import to_response_model


def _now() -> datetime:
    return datetime.now(timezone.utc)


class NotificationService:
    """Reads notifications and moves notifications and reports between statuses."""

    def _to_response(self, notification: Notification) -> NotificationResponse:
        try:
            payload = notification_payload_adapter.validate_python(notification.payload)
        except PydanticValidationError as e:
            logger.error(f"Service: notification {notification.id} has an unreadable payload: {e}")
            raise ValidationError(f"Notification {notification.id} has an invalid payload") from e
        return to_response_model(notification, NotificationResponse, payload=payload)

    def list_notifications(self, session: Session, user_id: UUID) -> list[NotificationResponse]:
        """List a user's notifications, newest first.

        Notifications whose payload cannot be read are skipped and logged.
        """
        stmt = select(Notification).where(Notification.user_id == user_id).order_by(Notification.created_at.desc())
        notifications = []
        for notification in session.exec(stmt).all():
            try:
                notifications.append(self._to_response(notification))
            except ValidationError:
                continue
        logger.debug(f"Service: list_notifications for user {user_id} found {len(notifications)}")
        return notifications

    def get_notification(self, session: Session, notification_id: UUID) -> NotificationResponse:
        """Get a notification with its parsed payload.

        Raises:
            NotFoundError: If the notification does not exist
            ValidationError: If its payload matches no known kind
        """
        notification = session.get(Notification, notification_id)
        if notification is None:
            raise NotFoundError("Notification", notification_id)
        return self._to_response(notification)

    def set_status(self, session: Session, notification_id: UUID, status: NotificationStatus) -> NotificationResponse:
        notification = session.get(Notification, notification_id)
        if notification is None:
            raise NotFoundError("Notification", notification_id)

        with atomic(session, "update notification status"):
            notification.status = status.value
            notification.updated_at = _now()
            session.add(notification)
        session.refresh(notification)
        logger.info(f"Service: notification {notification_id} marked {status.value}")
        return self._to_response(notification)

    def set_report_status(self, session: Session, report_id: UUID, status: ReportStatus) -> ReportResponse:
        """Move a report to a new status; VIEWED also stamps ``viewed_at``.

        Raises:
            NotFoundError: If the report does not exist
        """
        report = session.get(Report, report_id)
        if report is None:
            raise NotFoundError("Report", report_id)

        with atomic(session, "update report status"):
            report.status = status.value
            if status == ReportStatus.VIEWED:
                report.viewed_at = _now()
            session.add(report)
        session.refresh(report)
        logger.info(f"Service: report {report_id} marked {status.value}")
        return to_response_model(report, ReportResponse)


@lru_cache
def get_notification_service() -> NotificationService:
    """Get the notification service singleton."""
    return NotificationService()
