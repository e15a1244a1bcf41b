# custody_core/alerts/selectors.py
from __future__ import annotations

from django.db.models import QuerySet

from custody_core.alerts.models import Alert


def alerts_qs(*, holder_address: str) -> QuerySet[Alert]:
    return Alert.objects.filter(holder_address=holder_address)
