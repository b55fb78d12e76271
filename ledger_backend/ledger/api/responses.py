# ledger/api/responses.py

"""
Shared error payloads for ledger-backed endpoints.

A failed read is a 503 with retryable=true so the client can show a retry
button; it is never rendered as a zero balance.
"""

from rest_framework import status
from rest_framework.response import Response


def bad_request(exc) -> Response:
    return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)


def data_unavailable(exc) -> Response:
    return Response(
        {"detail": str(exc), "retryable": True},
        status=status.HTTP_503_SERVICE_UNAVAILABLE,
    )
