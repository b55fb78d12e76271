# firms/mixins.py

"""
FIRM-SCOPED VIEW HELPERS

Views that list or create firm-owned rows mix this in:
- scope_to_firms(qs): restrict any queryset with a `firm` FK to the caller's firms,
  optionally narrowed by ?firm_id=
- resolve_firm(firm_id): fetch one firm or raise 403
"""

from __future__ import annotations

from rest_framework.exceptions import PermissionDenied, ValidationError

from firms.services.access import FirmAccessDenied, accessible_firms, get_accessible_firm


UUID_LOOKUP_REGEX = "[0-9a-fA-F-]{36}"


class FirmScopedMixin:
    firm_lookup = "firm"
    lookup_value_regex = UUID_LOOKUP_REGEX

    def requested_firm_id(self):
        raw = (self.request.query_params.get("firm_id") or "").strip()
        return raw or None

    def scope_to_firms(self, qs):
        qs = qs.filter(**{f"{self.firm_lookup}__in": accessible_firms(self.request.user)})

        firm_id = self.requested_firm_id()
        if firm_id:
            qs = qs.filter(**{f"{self.firm_lookup}_id": self.resolve_firm(firm_id).id})
        return qs

    def resolve_firm(self, firm_id):
        if not firm_id:
            raise ValidationError({"firm_id": "firm_id is required"})
        try:
            return get_accessible_firm(user=self.request.user, firm_id=firm_id)
        except FirmAccessDenied as exc:
            raise PermissionDenied(str(exc)) from exc
