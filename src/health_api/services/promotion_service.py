"""Turns an inbound notification into a calendar event.

Promotion runs as a saga: the event is created first (archiving the
notification in the same transaction), then the report file is stored and
attached. If storing or attaching fails, the event and any stored file are
removed again and the notification goes back to its previous status. The
final report and notification status updates are best effort.
"""

import base64
import binascii
from datetime import date
from functools import lru_cache
from uuid import UUID

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from health_api.constants import PROMOTED_PROFESSIONAL_SPECIALTY, RESULT_SLOT
from health_api.exceptions import HealthApiError, InternalError, ValidationError
from health_api.models.api_model import (
    EventCreateInput,
    NotificationResponse,
    ProfessionalInput,
    ProfessionalResponse,
    PromotionInput,
    PromotionResponse,
)
from health_api.models.base_model import (
    EventType,
    FileAttachment,
    LabReportPayload,
    NotificationStatus,
    ReportReferencePayload,
    ReportStatus,
)
from health_api.services.event_service import EventService, get_event_service
from health_api.services.notification_service import NotificationService, get_notification_service
from health_api.services.professional_service import ProfessionalService, get_professional_service

DEFAULT_PROMOTED_TITLE = "New event"


def _decode_report(payload: LabReportPayload) -> bytes:
    try:
        return base64.b64decode(payload.report.file_content, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError("Report file content is not valid base64", {"report.fileContent": str(e)}) from e


class PromotionService:
    """Creates an event, and attaches its report, from a notification."""

    def __init__(
        self,
        event_service: EventService | None = None,
        professional_service: ProfessionalService | None = None,
        notification_service: NotificationService | None = None,
    ):
        self.event_service = event_service or get_event_service()
        self.professional_service = professional_service or get_professional_service()
        self.notification_service = notification_service or get_notification_service()

    @property
    def storage(self):
        return self.event_service.storage

    def _resolve_professional(
        self, session: Session, notification: NotificationResponse, data: PromotionInput
    ) -> ProfessionalResponse:
        """Pick the explicit professional, else match the doctor by name, else create one."""
        if data.professional_id:
            return self.professional_service.get_professional(session, data.professional_id)

        payload = notification.payload
        doctor_name = payload.doctor_name if isinstance(payload, LabReportPayload) else ""
        if not doctor_name.strip():
            raise ValidationError("Professional is required", {"professional_id": "Professional is required."})

        existing = self.professional_service.find_by_name(session, notification.user_id, doctor_name)
        if existing is not None:
            logger.debug(f"Service: promotion matched professional {existing.id} by name '{doctor_name}'")
            return existing

        return self.professional_service.create_professional(
            session,
            notification.user_id,
            ProfessionalInput(name=doctor_name, specialty=PROMOTED_PROFESSIONAL_SPECIALTY),
        )

    def _compensate(self, session: Session, event_id: UUID, url: str | None, notification: NotificationResponse) -> None:
        """Undo the steps already done by a failed promotion."""
        session.rollback()
        if url:
            try:
                self.storage.delete(url)
            except (OSError, ValueError) as e:
                logger.error(f"Service: compensation could not delete stored file {url}: {e}")
        try:
            self.event_service.delete_event(session, event_id)
            self.notification_service.set_status(session, notification.id, notification.status)
        except (HealthApiError, SQLAlchemyError) as e:
            logger.error(f"Service: compensation for event {event_id} failed: {e}")

    def promote(self, session: Session, notification_id: UUID, data: PromotionInput | None = None) -> PromotionResponse:
        """Create an event from a notification.

        Args:
            session: Database session
            notification_id: Notification to promote
            data: Overrides for title, date, times and professional

        Returns:
            The created event, the professional it was booked with and the
            stored report attachment, if any

        Raises:
            NotFoundError: Unknown notification, professional or report
            ValidationError: Invalid event fields or undecodable report content
            ConflictError: The professional is already booked in that range
            InternalError: Storing or attaching the report failed; nothing is kept
        """
        data = data or PromotionInput()
        notification = self.notification_service.get_notification(session, notification_id)
        payload = notification.payload
        logger.info(f"Service: promoting notification {notification_id} ({payload.kind})")

        content = _decode_report(payload) if isinstance(payload, LabReportPayload) else None
        professional = self._resolve_professional(session, notification, data)

        if data.title:
            title = data.title
        elif isinstance(payload, LabReportPayload):
            title = f"Report: {payload.report.file_name}"
        else:
            title = DEFAULT_PROMOTED_TITLE
        event_date = data.date or (payload.exam_date if isinstance(payload, LabReportPayload) else date.today().isoformat())

        event = self.event_service.create_event(
            session,
            notification.user_id,
            EventCreateInput(
                title=title,
                date=event_date,
                start_time=data.start_time,
                end_time=data.end_time,
                type=EventType.EXAM,
                professional_id=professional.id,
                files=[],
                notification_id=notification.id,
            ),
        )

        attachment = None
        if content is not None:
            url = None
            try:
                url = self.storage.save(event.id, RESULT_SLOT, payload.report.file_name, content)
                attachment = FileAttachment(
                    slot=RESULT_SLOT,
                    name=payload.report.file_name,
                    url=url,
                    upload_date=date.today().isoformat(),
                )
                event = self.event_service.update_event_files(session, event.id, [attachment])
            except (OSError, ValueError, HealthApiError, SQLAlchemyError) as e:
                logger.error(f"Service: attaching report to event {event.id} failed, rolling back promotion: {e}")
                self._compensate(session, event.id, url, notification)
                raise InternalError(f"Failed to attach report to event: {e}") from e

        if isinstance(payload, ReportReferencePayload):
            try:
                self.notification_service.set_report_status(session, payload.report_id, ReportStatus.VIEWED)
            except (HealthApiError, SQLAlchemyError) as e:
                logger.error(f"Service: could not mark report {payload.report_id} as viewed: {e}")

        try:
            self.notification_service.set_status(session, notification.id, NotificationStatus.READ)
        except (HealthApiError, SQLAlchemyError) as e:
            logger.error(f"Service: could not mark notification {notification.id} as read: {e}")

        logger.info(f"Service: notification {notification_id} promoted to event {event.id}")
        return PromotionResponse(event=event, professional=professional, attachment=attachment)


@lru_cache
def get_promotion_service() -> PromotionService:
    """Get the promotion service singleton."""
    return PromotionService()
