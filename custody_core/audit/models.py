# custody_core/audit/models.py
from django.core.exceptions import ValidationError
from django.db import models


class AuditEvent(models.Model):
    """
    Immutable audit record for registry decisions (registration, approval,
    batch deactivation and its reason). Custody movements live in
    supply_events, not here.
    """
    event_code = models.CharField(max_length=128, db_index=True)  # e.g. "batch.deactivated"
    entity_type = models.CharField(max_length=64, db_index=True)  # e.g. "Batch"
    entity_id = models.CharField(max_length=128, db_index=True)

    # None for system actors (the expiry sweep).
    actor_address = models.CharField(max_length=128, null=True, blank=True, db_index=True)

    occurred_at = models.DateTimeField(auto_now_add=True, db_index=True)
    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = "audit_audit_event"
        indexes = [
            models.Index(fields=["entity_type", "entity_id"]),
            models.Index(fields=["event_code", "occurred_at"]),
        ]

    def __str__(self) -> str:
        return f"{self.event_code} {self.entity_type}:{self.entity_id}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("AuditEvent is immutable and cannot be modified once created.")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("AuditEvent is immutable and cannot be deleted.")
