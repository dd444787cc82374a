"""
Notifications API - inbound lab reports and report references.

This module provides REST endpoints for:
- Listing a user's notifications and changing their status
- Promoting a notification into a calendar event with its report attached
- Changing the status of an issued report
"""

from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query, status
from sqlmodel import Session

from health_api.database import get_db_session
from health_api.models.api_model import (
    NotificationResponse,
    NotificationStatusUpdate,
    PromotionInput,
    PromotionResponse,
    ReportResponse,
    ReportStatusUpdate,
)
from health_api.services.notification_service import NotificationService, get_notification_service
from health_api.services.promotion_service import PromotionService, get_promotion_service

router = APIRouter()


@router.get("/notifications", response_model=list[NotificationResponse])
def list_notifications(
    user_id: UUID = Query(alias="userId"),
    notification_service: NotificationService = Depends(get_notification_service),
    session: Session = Depends(get_db_session),
) -> list[NotificationResponse]:
    return notification_service.list_notifications(session, user_id)


@router.patch("/notifications/{notification_id}", response_model=NotificationResponse)
def update_notification_status(
    notification_id: UUID,
    data: NotificationStatusUpdate,
    notification_service: NotificationService = Depends(get_notification_service),
    session: Session = Depends(get_db_session),
) -> NotificationResponse:
    return notification_service.set_status(session, notification_id, data.status)


@router.post(
    "/notifications/{notification_id}/promote",
    response_model=PromotionResponse,
    status_code=status.HTTP_201_CREATED,
)
def promote_notification(
    notification_id: UUID,
    data: PromotionInput | None = Body(default=None),
    promotion_service: PromotionService = Depends(get_promotion_service),
    session: Session = Depends(get_db_session),
) -> PromotionResponse:
    """Create an event from a notification and attach its report.

    Args:
        notification_id: Notification to promote
        data: Optional title, date, times and professional overrides
        promotion_service: Promotion service instance
        session: Database session

    Returns:
        PromotionResponse with the event, professional and stored attachment
    """
    return promotion_service.promote(session, notification_id, data)


@router.patch("/reports/{report_id}/status", response_model=ReportResponse)
def update_report_status(
    report_id: UUID,
    data: ReportStatusUpdate,
    notification_service: NotificationService = Depends(get_notification_service),
    session: Session = Depends(get_db_session),
) -> ReportResponse:
    return notification_service.set_report_status(session, report_id, data.status)
