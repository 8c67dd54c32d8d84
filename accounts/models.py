"""
Database models for the Patient 360 administration backend.

Doctors, patients and administrators are all Django auth users
distinguished by ``role``.  Role specific fields live on one-to-one
profiles, mirroring how the dashboards present them.  Administrative
actions are recorded in :class:`AuditEntry`, which is append-only.
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import Q


class User(AbstractUser):
    """Custom user model with a role and a lifecycle state.

    Django's own ``is_active`` flag is the account state: an inactive
    user can no longer authenticate.  The deactivation record is
    present exactly when the account is inactive; the reactivation
    record is overwritten each time the account is reactivated.
    """
    ROLE_ADMIN = 'admin'
    ROLE_DOCTOR = 'doctor'
    ROLE_PATIENT = 'patient'
    ROLE_CHOICES = [
        (ROLE_ADMIN, 'Administrator'),
        (ROLE_DOCTOR, 'Doctor'),
        (ROLE_PATIENT, 'Patient'),
    ]
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_PATIENT, db_index=True)
    national_id = models.CharField(max_length=11, blank=True, default='')

    deactivation_reason = models.CharField(max_length=64, blank=True, default='')
    deactivation_notes = models.TextField(blank=True, default='')
    deactivated_by = models.ForeignKey(
        'self', null=True, blank=True, on_delete=models.SET_NULL, related_name='+'
    )
    deactivated_at = models.DateTimeField(null=True, blank=True)

    reactivated_by = models.ForeignKey(
        'self', null=True, blank=True, on_delete=models.SET_NULL, related_name='+'
    )
    reactivated_at = models.DateTimeField(null=True, blank=True)

    created_by = models.ForeignKey(
        'self', null=True, blank=True, on_delete=models.SET_NULL, related_name='provisioned_accounts'
    )

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['role', 'national_id'],
                condition=~Q(national_id=''),
                name='uniq_national_id_per_role',
            ),
            models.UniqueConstraint(
                fields=['role', 'email'],
                condition=~Q(email=''),
                name='uniq_email_per_role',
            ),
            models.CheckConstraint(
                condition=(
                    Q(is_active=True, deactivated_at__isnull=True)
                    | Q(is_active=False, deactivated_at__isnull=False)
                ),
                name='deactivation_matches_state',
            ),
        ]

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"

    @property
    def display_name(self) -> str:
        return self.get_full_name() or self.username

    @property
    def deactivation(self) -> dict | None:
        if self.is_active:
            return None
        return {
            'reasonCode': self.deactivation_reason,
            'notes': self.deactivation_notes,
            'byAdminId': self.deactivated_by_id,
            'atTimestamp': self.deactivated_at.isoformat() if self.deactivated_at else None,
        }

    @property
    def reactivation(self) -> dict | None:
        if not self.reactivated_at:
            return None
        return {
            'byAdminId': self.reactivated_by_id,
            'atTimestamp': self.reactivated_at.isoformat(),
        }


class DoctorProfile(models.Model):
    """Doctor specific information, created by an administrator."""
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='doctor_profile')
    license_number = models.CharField(max_length=64, unique=True)
    # statistics group by both codes
    specialization_code = models.CharField(max_length=64, db_index=True)
    sub_specialization = models.CharField(max_length=255, blank=True)
    governorate_code = models.CharField(max_length=64, db_index=True)
    city = models.CharField(max_length=128, blank=True)
    clinic_address = models.CharField(max_length=255)
    phone_number = models.CharField(max_length=32)
    education_code = models.CharField(max_length=64, blank=True)
    years_of_experience = models.PositiveIntegerField(default=0)
    institution = models.CharField(max_length=255, blank=True)
    gender = models.CharField(max_length=10, blank=True)
    date_of_birth = models.DateField(null=True, blank=True)

    def __str__(self) -> str:
        return f"{self.user.username} ({self.specialization_code})"


class PatientProfile(models.Model):
    """Patient specific information.

    Patients register themselves through a separate flow; the
    administration backend only reads these records and manages the
    lifecycle state of the owning user.
    """
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='patient_profile')
    date_of_birth = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=10, blank=True)
    phone_number = models.CharField(max_length=32, blank=True)
    address = models.CharField(max_length=255, blank=True)
    governorate_code = models.CharField(max_length=64, blank=True)

    def __str__(self) -> str:
        return f"{self.user.username} ({self.gender})"


class CatalogEntry(models.Model):
    """One code of a versioned reference catalog."""
    SPECIALIZATION = 'specialization'
    GOVERNORATE = 'governorate'
    EDUCATION = 'education'
    DEACTIVATION_REASON = 'deactivation_reason'
    CATALOG_CHOICES = [
        (SPECIALIZATION, 'Specialization'),
        (GOVERNORATE, 'Governorate'),
        (EDUCATION, 'Education level'),
        (DEACTIVATION_REASON, 'Deactivation reason'),
    ]
    catalog = models.CharField(max_length=32, choices=CATALOG_CHOICES)
    code = models.CharField(max_length=64)
    name_en = models.CharField(max_length=255)
    name_ar = models.CharField(max_length=255, blank=True)
    version = models.CharField(max_length=32)
    sort_order = models.PositiveIntegerField(default=0)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['catalog', 'version', 'code'], name='uniq_catalog_code'),
        ]
        indexes = [
            models.Index(fields=['catalog', 'version'], name='accounts_ca_catalog_5b1f0e_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.catalog}:{self.code}@{self.version}"


class ImmutableAuditEntryError(Exception):
    """Raised on any attempt to change or remove an audit entry."""


class AuditEntryQuerySet(models.QuerySet):
    def update(self, **kwargs):
        raise ImmutableAuditEntryError('audit entries cannot be updated')

    def delete(self):
        raise ImmutableAuditEntryError('audit entries cannot be deleted')


class AuditEntry(models.Model):
    """Immutable record of one administrative action."""
    ADD_DOCTOR = 'ADD_DOCTOR'
    DEACTIVATE_DOCTOR = 'DEACTIVATE_DOCTOR'
    DEACTIVATE_PATIENT = 'DEACTIVATE_PATIENT'
    REACTIVATE_DOCTOR = 'REACTIVATE_DOCTOR'
    REACTIVATE_PATIENT = 'REACTIVATE_PATIENT'
    EXPORT_DOCTORS = 'EXPORT_DOCTORS'
    EXPORT_PATIENTS = 'EXPORT_PATIENTS'
    ACTION_CHOICES = [
        (ADD_DOCTOR, 'Add doctor'),
        (DEACTIVATE_DOCTOR, 'Deactivate doctor'),
        (DEACTIVATE_PATIENT, 'Deactivate patient'),
        (REACTIVATE_DOCTOR, 'Reactivate doctor'),
        (REACTIVATE_PATIENT, 'Reactivate patient'),
        (EXPORT_DOCTORS, 'Export doctors'),
        (EXPORT_PATIENTS, 'Export patients'),
    ]

    action_code = models.CharField(max_length=32, choices=ACTION_CHOICES)
    description = models.TextField()
    admin = models.ForeignKey(User, on_delete=models.PROTECT, related_name='audit_entries')
    admin_name = models.CharField(max_length=255)
    target_role = models.CharField(max_length=10, blank=True, default='')
    target_id = models.BigIntegerField(null=True, blank=True)
    detail = models.JSONField(default=dict, blank=True)
    timestamp = models.DateTimeField()

    objects = AuditEntryQuerySet.as_manager()

    class Meta:
        indexes = [
            models.Index(fields=['action_code', 'timestamp'], name='accounts_au_action__8c2d41_idx'),
            models.Index(fields=['target_role', 'target_id', 'timestamp'], name='accounts_au_target__3e9a70_idx'),
            models.Index(fields=['timestamp', 'id'], name='accounts_au_timesta_a61f5c_idx'),
        ]

    def save(self, *args, **kwargs):
        if self.pk is not None and not kwargs.get('force_insert'):
            raise ImmutableAuditEntryError('audit entries cannot be updated')
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ImmutableAuditEntryError('audit entries cannot be deleted')

    def __str__(self) -> str:
        return f"{self.action_code}:{self.admin_id}@{self.timestamp:%F %T}"
