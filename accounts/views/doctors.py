"""
Doctor administration endpoints.

Administrators create doctor accounts (the generated credentials are
returned exactly once in the creation response), list and export them,
and move them between the active and inactive states.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.models import User
from accounts.permissions import IsAdminRole
from accounts.serializers.doctor import DoctorCreateSerializer, doctor_to_dict
from accounts.services.lifecycle import create_doctor
from accounts.views.accounts import list_response, export_response, deactivate_response, reactivate_response


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def doctors(request):
    if request.method == 'GET':
        return list_response(request, User.ROLE_DOCTOR, doctor_to_dict)
    s = DoctorCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user, credentials = create_doctor(request.user, s.to_service_data())
    return Response(
        {'ok': True, 'doctor': doctor_to_dict(user), 'credentials': credentials.as_dict()},
        status=status.HTTP_201_CREATED,
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def export_doctors(request):
    return export_response(request, User.ROLE_DOCTOR, doctor_to_dict)


@api_view(['PUT', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def deactivate_doctor(request, pk: int):
    return deactivate_response(request, User.ROLE_DOCTOR, pk, doctor_to_dict)


@api_view(['PUT', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def reactivate_doctor(request, pk: int):
    return reactivate_response(request, User.ROLE_DOCTOR, pk, doctor_to_dict)
