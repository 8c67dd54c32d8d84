"""
Shared handlers for the doctor and patient administration endpoints.

Doctors and patients follow the same lifecycle; the role specific view
modules pass their role and row formatter to these helpers.
"""
from __future__ import annotations

from typing import Callable

from rest_framework import status
from rest_framework.response import Response

from accounts import repositories
from accounts.serializers.account import AccountListQuerySerializer, DeactivateSerializer
from accounts.services.lifecycle import deactivate_account, reactivate_account, record_export


def list_response(request, role: str, formatter: Callable) -> Response:
    q = AccountListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    page = q.validated_data.get('page') or 1
    page_size = q.validated_data.get('pageSize') or 0
    items, total = repositories.list_accounts(
        role,
        status=q.validated_data.get('status'),
        q=(q.validated_data.get('q') or '').strip() or None,
        page=page,
        page_size=page_size,
    )
    return Response({
        'ok': True,
        'data': {
            'items': [formatter(u) for u in items],
            'total': total,
            'page': page,
            'pageSize': page_size or total,
        },
    })


def export_response(request, role: str, formatter: Callable) -> Response:
    """Return every account of ``role`` as rows and audit the export."""
    items, total = repositories.list_accounts(role)
    rows = [formatter(u) for u in items]
    record_export(request.user, role, total)
    return Response({'ok': True, 'data': rows, 'count': total})


def deactivate_response(request, role: str, pk: int, formatter: Callable) -> Response:
    s = DeactivateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    account = deactivate_account(
        pk, role, s.validated_data['reasonCode'], s.validated_data.get('notes'), request.user,
    )
    return Response({'ok': True, role: formatter(account)}, status=status.HTTP_200_OK)


def reactivate_response(request, role: str, pk: int, formatter: Callable) -> Response:
    account = reactivate_account(pk, role, request.user)
    return Response({'ok': True, role: formatter(account)}, status=status.HTTP_200_OK)
