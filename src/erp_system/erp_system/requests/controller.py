from __future__ import annotations

from flask import Flask, request

from ..common.serialization import to_dto
from ..container import Container
from ..http.auth import current_principal
from ..http.payload import listed, ok, page_params, paged, parse_body
from ..rbac import permission_codes as perms
from .schemas import AssignRequestBody, CommentBody, CreateRequestBody, NoteBody, ReasonBody


def request_dto(entity) -> dict:
    return to_dto(entity, extra={"is_overdue": entity.is_overdue()})


def register(app: Flask, container: Container) -> None:
    guards = container.guards
    service = container.request_service

    def can_view_all() -> bool:
        return guards.has(perms.REQUESTS_VIEW_ALL) or guards.has(perms.REQUESTS_MANAGE)

    @app.route("/v1/requests", methods=["POST"], endpoint="create_request")
    @guards.permission(perms.REQUESTS_CREATE)
    def create_request():
        body = parse_body(CreateRequestBody)
        principal = current_principal()
        created = service.create_request(
            tenant_id=principal.tenant_id, requester_id=principal.user_id, **body.model_dump()
        )
        return ok(created, request_dto, status=201)

    @app.route("/v1/requests", methods=["GET"], endpoint="list_requests")
    @guards.login_required
    def list_requests():
        principal = current_principal()
        page = service.list_requests(
            tenant_id=principal.tenant_id,
            user_id=principal.user_id,
            params=page_params(),
            scope=request.args.get("scope", "mine"),
            status=request.args.get("status"),
            has_view_all=can_view_all(),
        )
        return paged(page, request_dto)

    @app.route("/v1/requests/<request_id>", methods=["GET"], endpoint="get_request")
    @guards.login_required
    def get_request(request_id: str):
        principal = current_principal()
        found = service.get_request(
            tenant_id=principal.tenant_id,
            request_id=request_id,
            user_id=principal.user_id,
            has_view_all=can_view_all(),
        )
        return ok(found, request_dto)

    @app.route("/v1/requests/<request_id>/history", methods=["GET"], endpoint="get_request_history")
    @guards.login_required
    def get_request_history(request_id: str):
        principal = current_principal()
        history = service.get_request_history(
            tenant_id=principal.tenant_id,
            request_id=request_id,
            user_id=principal.user_id,
            has_view_all=can_view_all(),
        )
        return listed(history)

    @app.route("/v1/requests/<request_id>/submit", methods=["PATCH"], endpoint="submit_request")
    @guards.login_required
    def submit_request(request_id: str):
        principal = current_principal()
        updated = service.submit_request(tenant_id=principal.tenant_id, request_id=request_id, user_id=principal.user_id)
        return ok(updated, request_dto)

    @app.route("/v1/requests/<request_id>/assign", methods=["PATCH"], endpoint="assign_request")
    @guards.permission(perms.REQUESTS_MANAGE)
    def assign_request(request_id: str):
        body = parse_body(AssignRequestBody)
        principal = current_principal()
        updated = service.assign_request(
            tenant_id=principal.tenant_id,
            request_id=request_id,
            assignee_id=body.assignee_id,
            note=body.note,
            user_id=principal.user_id,
        )
        return ok(updated, request_dto)

    @app.route("/v1/requests/<request_id>/request-info", methods=["PATCH"], endpoint="request_info")
    @guards.login_required
    def request_info(request_id: str):
        body = parse_body(NoteBody)
        principal = current_principal()
        updated = service.request_info(
            tenant_id=principal.tenant_id, request_id=request_id, note=body.note, user_id=principal.user_id
        )
        return ok(updated, request_dto)

    @app.route("/v1/requests/<request_id>/provide-info", methods=["PATCH"], endpoint="provide_info")
    @guards.login_required
    def provide_info(request_id: str):
        body = parse_body(NoteBody)
        principal = current_principal()
        updated = service.provide_info(
            tenant_id=principal.tenant_id, request_id=request_id, note=body.note, user_id=principal.user_id
        )
        return ok(updated, request_dto)

    @app.route("/v1/requests/<request_id>/approve", methods=["PATCH"], endpoint="approve_request")
    @guards.permission(perms.REQUESTS_MANAGE)
    def approve_request(request_id: str):
        body = parse_body(NoteBody)
        principal = current_principal()
        updated = service.approve_request(
            tenant_id=principal.tenant_id, request_id=request_id, note=body.note, user_id=principal.user_id
        )
        return ok(updated, request_dto)

    @app.route("/v1/requests/<request_id>/reject", methods=["PATCH"], endpoint="reject_request")
    @guards.permission(perms.REQUESTS_MANAGE)
    def reject_request(request_id: str):
        body = parse_body(ReasonBody)
        principal = current_principal()
        updated = service.reject_request(
            tenant_id=principal.tenant_id, request_id=request_id, reason=body.reason, user_id=principal.user_id
        )
        return ok(updated, request_dto)

    @app.route("/v1/requests/<request_id>/complete", methods=["PATCH"], endpoint="complete_request")
    @guards.login_required
    def complete_request(request_id: str):
        body = parse_body(NoteBody)
        principal = current_principal()
        updated = service.complete_request(
            tenant_id=principal.tenant_id, request_id=request_id, note=body.note, user_id=principal.user_id
        )
        return ok(updated, request_dto)

    @app.route("/v1/requests/<request_id>/cancel", methods=["PATCH"], endpoint="cancel_request")
    @guards.login_required
    def cancel_request(request_id: str):
        body = parse_body(ReasonBody)
        principal = current_principal()
        updated = service.cancel_request(
            tenant_id=principal.tenant_id,
            request_id=request_id,
            reason=body.reason,
            user_id=principal.user_id,
            is_manager=guards.has(perms.REQUESTS_MANAGE),
        )
        return ok(updated, request_dto)

    @app.route("/v1/requests/<request_id>/comments", methods=["POST"], endpoint="add_request_comment")
    @guards.login_required
    def add_request_comment(request_id: str):
        body = parse_body(CommentBody)
        principal = current_principal()
        comment = service.add_request_comment(
            tenant_id=principal.tenant_id,
            request_id=request_id,
            author_id=principal.user_id,
            content=body.content,
            is_internal=body.is_internal,
            has_view_all=can_view_all(),
            is_manager=guards.has(perms.REQUESTS_MANAGE),
        )
        return ok(comment, status=201)

    @app.route("/v1/requests/<request_id>/comments", methods=["GET"], endpoint="list_request_comments")
    @guards.login_required
    def list_request_comments(request_id: str):
        principal = current_principal()
        comments = service.list_request_comments(
            tenant_id=principal.tenant_id,
            request_id=request_id,
            user_id=principal.user_id,
            has_view_all=can_view_all(),
            is_manager=guards.has(perms.REQUESTS_MANAGE),
        )
        return listed(comments)
