# custody_core/supply_events/api/views.py
from __future__ import annotations

from rest_framework.exceptions import ValidationError as DRFValidationError

from custody_core.common.api.pagination import paginate
from custody_core.supply_events.api.filters import SupplyChainEventFilter
from custody_core.supply_events.api.serializers import SupplyChainEventSerializer


def filtered_history_response(request, queryset):
    """
    Apply the history query-string filters and paginate. Order (append order)
    is never changed by filtering.
    """
    f = SupplyChainEventFilter(request.query_params, queryset=queryset)
    if not f.is_valid():
        raise DRFValidationError(f.errors)
    return paginate(request, f.qs.order_by("id"), SupplyChainEventSerializer)
