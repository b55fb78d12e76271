# ledger/api/views/_party.py

from __future__ import annotations

from rest_framework.exceptions import NotFound

from firms.services.access import user_can_access_firm
from parties.services.party_store import PartyNotFound, fetch_party


def resolve_party_for_user(*, user, party_id):
    """
    Party lookup for read endpoints.

    A party in a firm the caller cannot access is reported as not found.
    DataUnavailable is left to the caller.
    """
    try:
        party = fetch_party(party_id=party_id)
    except PartyNotFound as exc:
        raise NotFound(str(exc)) from exc

    if not user_can_access_firm(user, party.firm_id):
        raise NotFound(f"Party {party_id} not found")
    return party


def request_seq(request):
    raw = request.query_params.get("request_seq")
    return str(raw).strip() if raw not in (None, "") else None
