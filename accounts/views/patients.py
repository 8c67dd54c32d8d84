"""
Patient administration endpoints.

Patients register through their own flow; administrators only list,
export, deactivate and reactivate them here.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from accounts.models import User
from accounts.permissions import IsAdminRole
from accounts.serializers.patient import patient_to_dict
from accounts.views.accounts import list_response, export_response, deactivate_response, reactivate_response


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def list_patients(request):
    return list_response(request, User.ROLE_PATIENT, patient_to_dict)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def export_patients(request):
    return export_response(request, User.ROLE_PATIENT, patient_to_dict)


@api_view(['PUT', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def deactivate_patient(request, pk: int):
    return deactivate_response(request, User.ROLE_PATIENT, pk, patient_to_dict)


@api_view(['PUT', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def reactivate_patient(request, pk: int):
    return reactivate_response(request, User.ROLE_PATIENT, pk, patient_to_dict)
