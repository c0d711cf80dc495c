from __future__ import annotations

from datetime import datetime
from typing import Optional

from flask import Flask
from pydantic import Field

from ..common.datetime_utils import as_naive_utc
from ..container import Container
from ..http.auth import current_principal
from ..http.payload import listed, ok, page_params, paged, parse_body, query_bool
from ..http.schema import RequestSchema
from ..rbac import permission_codes as perms


class SendNotificationBody(RequestSchema):
    user_id: str
    title: str = Field(..., min_length=1, max_length=256)
    message: str = Field(..., min_length=1, max_length=5000)
    type: str = "INFO"
    priority: str = "NORMAL"
    channel: str = "IN_APP"
    entity_type: Optional[str] = Field(None, max_length=64)
    entity_id: Optional[str] = None
    action_url: Optional[str] = Field(None, max_length=512)
    scheduled_for: Optional[datetime] = None


class EmailNotificationBody(RequestSchema):
    user_email: str = Field(..., max_length=254)


class PreferenceBody(RequestSchema):
    alert_type: str = Field(..., min_length=1, max_length=64)
    channel: str
    is_enabled: bool


def register(app: Flask, container: Container) -> None:
    guards = container.guards
    service = container.notification_service

    @app.route("/v1/notifications", methods=["POST"], endpoint="create_notification")
    @guards.permission(perms.NOTIFICATIONS_SEND)
    def create_notification():
        body = parse_body(SendNotificationBody)
        data = body.model_dump()
        if body.scheduled_for is not None:
            data["scheduled_for"] = as_naive_utc(body.scheduled_for)
        notification = service.create_notification(tenant_id=current_principal().tenant_id, **data)
        return ok(notification, status=201)

    @app.route("/v1/notifications/<notification_id>/send-email", methods=["POST"], endpoint="send_email_notification")
    @guards.permission(perms.NOTIFICATIONS_SEND)
    def send_email_notification(notification_id: str):
        body = parse_body(EmailNotificationBody)
        notification = service.send_email_notification(
            tenant_id=current_principal().tenant_id, notification_id=notification_id, user_email=body.user_email
        )
        return ok(notification)

    @app.route("/v1/notifications/me", methods=["GET"], endpoint="list_my_notifications")
    @guards.login_required
    def list_my_notifications():
        principal = current_principal()
        page = service.list_my_notifications(
            tenant_id=principal.tenant_id,
            user_id=principal.user_id,
            params=page_params(),
            only_unread=query_bool("onlyUnread"),
        )
        return paged(page)

    @app.route("/v1/notifications/me/unread-count", methods=["GET"], endpoint="count_unread_notifications")
    @guards.login_required
    def count_unread_notifications():
        principal = current_principal()
        return {"count": service.count_unread(tenant_id=principal.tenant_id, user_id=principal.user_id)}

    @app.route("/v1/notifications/me/read-all", methods=["PATCH"], endpoint="mark_all_notifications_read")
    @guards.login_required
    def mark_all_notifications_read():
        principal = current_principal()
        return {"updated": service.mark_all_as_read(tenant_id=principal.tenant_id, user_id=principal.user_id)}

    @app.route("/v1/notifications/me/<notification_id>/read", methods=["PATCH"], endpoint="mark_notification_read")
    @guards.login_required
    def mark_notification_read(notification_id: str):
        principal = current_principal()
        notification = service.mark_as_read(
            tenant_id=principal.tenant_id, user_id=principal.user_id, notification_id=notification_id
        )
        return ok(notification)

    @app.route("/v1/notifications/me/<notification_id>", methods=["DELETE"], endpoint="delete_notification")
    @guards.login_required
    def delete_notification(notification_id: str):
        principal = current_principal()
        service.delete_notification(
            tenant_id=principal.tenant_id, user_id=principal.user_id, notification_id=notification_id
        )
        return "", 204

    @app.route("/v1/notifications/preferences", methods=["PUT"], endpoint="set_notification_preference")
    @guards.login_required
    def set_notification_preference():
        body = parse_body(PreferenceBody)
        principal = current_principal()
        preference = service.set_preference(
            tenant_id=principal.tenant_id, user_id=principal.user_id, **body.model_dump()
        )
        return ok(preference)

    @app.route("/v1/notifications/preferences", methods=["GET"], endpoint="list_notification_preferences")
    @guards.login_required
    def list_notification_preferences():
        principal = current_principal()
        return listed(service.list_preferences(tenant_id=principal.tenant_id, user_id=principal.user_id))
