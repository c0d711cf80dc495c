from __future__ import annotations

import pytest

from erp_system.audit.memory_repository import InMemoryAuditLogRepository
from erp_system.audit.model import AuditAction, AuditEntity, AuditLogFilter, AuditModule
from erp_system.audit.service import AuditService, sanitize
from erp_system.audit.signature import AuditSignatureService
from erp_system.common.pagination import PageParams
from erp_system.core.constants import REDACTED


class BrokenRepo:
    def save(self, log):
        raise RuntimeError("database down")


def make_service():
    repo = InMemoryAuditLogRepository()
    return AuditService(repo, AuditSignatureService("secret")), repo


def test_sanitize_redacts_nested_secrets():
    data = {"username": "ana", "password": "x", "profile": {"access_pin_hash": "h", "items": [{"apiKey": "k"}]}}
    clean = sanitize(data)
    assert clean["username"] == "ana"
    assert clean["password"] == REDACTED
    assert clean["profile"]["access_pin_hash"] == REDACTED
    assert clean["profile"]["items"][0]["apiKey"] == REDACTED


def test_log_signs_and_sets_module():
    service, _ = make_service()
    entry = service.log(
        tenant_id="t1",
        user_id="u1",
        action=AuditAction.CREATE,
        entity=AuditEntity.EMPLOYEE,
        entity_id="e1",
        new_data={"name": "Ana"},
    )
    assert entry.module is AuditModule.HR
    assert entry.signature
    assert AuditSignatureService("secret").verify(entry)
    assert not AuditSignatureService("other").verify(entry)


def test_log_failure_is_swallowed():
    service = AuditService(BrokenRepo(), AuditSignatureService("secret"))
    assert service.log(tenant_id="t1", action=AuditAction.CREATE, entity=AuditEntity.USER, entity_id="u1") is None


def test_verify_integrity_detects_tampering():
    service, repo = make_service()
    first = service.log(tenant_id="t1", action=AuditAction.CREATE, entity=AuditEntity.USER, entity_id="u1")
    service.log(tenant_id="t1", action=AuditAction.UPDATE, entity=AuditEntity.USER, entity_id="u1")
    assert service.verify_integrity(tenant_id="t1").valid

    first.new_data = {"username": "changed"}
    repo.save(first)
    result = service.verify_integrity(tenant_id="t1")
    assert not result.valid
    assert result.invalid_log_ids == [first.id]
    assert result.total_checked == 2


def test_list_logs_filters_by_entity_and_tenant():
    service, _ = make_service()
    service.log(tenant_id="t1", action=AuditAction.CREATE, entity=AuditEntity.USER, entity_id="u1")
    service.log(tenant_id="t1", action=AuditAction.CREATE, entity=AuditEntity.LOAN, entity_id="l1")
    service.log(tenant_id="t2", action=AuditAction.CREATE, entity=AuditEntity.USER, entity_id="u9")

    page = service.list_logs(tenant_id="t1", filters=AuditLogFilter(entity=AuditEntity.USER), params=PageParams())
    assert page.total == 1
    assert page.items[0].entity_id == "u1"

    history = service.get_entity_history(tenant_id="t1", entity=AuditEntity.LOAN, entity_id="l1")
    assert [h.entity_id for h in history] == ["l1"]


def test_signer_falls_back_to_jwt_secret():
    assert AuditSignatureService.from_secrets(audit_secret="", jwt_secret="jwt") is not None
    with pytest.raises(ValueError):
        AuditSignatureService.from_secrets(audit_secret="", jwt_secret="")
