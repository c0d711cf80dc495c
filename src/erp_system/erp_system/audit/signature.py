"""HMAC-SHA256 signatures that make audit log tampering detectable."""
from __future__ import annotations

import hashlib
import hmac
import json
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from ..common.serialization import to_jsonable
from .model import AuditLog


@dataclass(frozen=True)
class ChainVerification:
    valid: bool
    total_checked: int
    invalid_log_ids: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "invalidLogIds": list(self.invalid_log_ids),
            "totalChecked": self.total_checked,
        }


class AuditSignatureService:
    def __init__(self, secret: str):
        if not secret:
            raise ValueError("An HMAC secret is required to sign audit logs")
        self._key = secret.encode("utf-8")

    @classmethod
    def from_secrets(
        cls,
        *,
        audit_secret: Optional[str],
        jwt_secret: Optional[str] = None,
        fallback_secret: Optional[str] = None,
    ) -> "AuditSignatureService":
        if audit_secret:
            return cls(audit_secret)
        base = jwt_secret or fallback_secret
        if not base:
            raise ValueError("Configure AUDIT_HMAC_SECRET or JWT_SECRET")
        return cls(f"{base}-audit")

    @staticmethod
    def canonical_payload(log: AuditLog) -> str:
        payload = {
            "userId": log.user_id,
            "action": to_jsonable(log.action),
            "entity": to_jsonable(log.entity),
            "entityId": log.entity_id,
            "module": to_jsonable(log.module),
            "oldData": to_jsonable(log.old_data),
            "newData": to_jsonable(log.new_data),
            "metadata": to_jsonable(log.metadata),
            "createdAt": log.created_at.isoformat(),
        }
        # sort_keys applies to nested objects as well
        return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)

    def sign(self, log: AuditLog) -> str:
        message = self.canonical_payload(log).encode("utf-8")
        return hmac.new(self._key, message, hashlib.sha256).hexdigest()

    def verify(self, log: AuditLog) -> bool:
        if not log.signature:
            return False
        return hmac.compare_digest(self.sign(log), log.signature)

    def verify_chain(self, logs: Iterable[AuditLog]) -> ChainVerification:
        invalid: List[str] = []
        total = 0
        for log in logs:
            total += 1
            if not self.verify(log):
                invalid.append(log.id)
        return ChainVerification(valid=not invalid, total_checked=total, invalid_log_ids=invalid)
