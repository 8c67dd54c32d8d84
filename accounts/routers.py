"""
URL mappings for the administration API.

Trailing slashes are omitted, matching the paths the dashboards call.
"""
from django.urls import path, include

from .views import health
from .views.audit import audit_logs
from .views.catalogs import catalogs
from .views.doctors import doctors, export_doctors, deactivate_doctor, reactivate_doctor
from .views.patients import list_patients, export_patients, deactivate_patient, reactivate_patient
from .views.statistics import statistics


urlpatterns = [
    # exposes /metrics
    path('', include('django_prometheus.urls')),
    path('healthz', health.healthz),
    # Doctors
    path('api/admin/doctors', doctors),
    path('api/admin/doctors/export', export_doctors),
    path('api/admin/doctors/<int:pk>/deactivate', deactivate_doctor),
    path('api/admin/doctors/<int:pk>/reactivate', reactivate_doctor),
    # Patients
    path('api/admin/patients', list_patients),
    path('api/admin/patients/export', export_patients),
    path('api/admin/patients/<int:pk>/deactivate', deactivate_patient),
    path('api/admin/patients/<int:pk>/reactivate', reactivate_patient),
    # Audit trail and statistics
    path('api/admin/audit-logs', audit_logs),
    path('api/admin/statistics', statistics),
    # Reference data
    path('api/catalogs', catalogs),
]
