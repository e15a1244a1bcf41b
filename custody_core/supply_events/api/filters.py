# custody_core/supply_events/api/filters.py
import django_filters

from custody_core.supply_events.models import EventType, SupplyChainEvent


class SupplyChainEventFilter(django_filters.FilterSet):
    event_type = django_filters.ChoiceFilter(choices=EventType.choices)
    from_entity = django_filters.CharFilter()
    to_entity = django_filters.CharFilter()
    since = django_filters.IsoDateTimeFilter(field_name="timestamp", lookup_expr="gte")
    until = django_filters.IsoDateTimeFilter(field_name="timestamp", lookup_expr="lte")

    class Meta:
        model = SupplyChainEvent
        fields = ["event_type", "from_entity", "to_entity", "since", "until"]
