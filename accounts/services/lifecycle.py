"""
Account lifecycle: doctor provisioning and deactivation/reactivation.

Every operation here is a single-account transaction.  The account row
is locked, the state transition is applied with a conditional update on
the expected ``is_active`` value, and the matching audit entry is
appended inside the same ``transaction.atomic()`` block.  Either both
the mutation and its audit entry are committed, or neither is.
"""
import html
import logging
import re
from typing import Optional, Any, Dict, Tuple

import bleach
from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework.exceptions import PermissionDenied

from accounts import repositories
from accounts.catalogs import CatalogProvider, get_catalog_provider, SPECIALIZATION, DEACTIVATION_REASON
from accounts.exceptions import ValidationError, NotFoundError, ConflictError, InvalidStateError
from accounts.models import AuditEntry, DoctorProfile, User
from accounts.services.audit import append_entry
from accounts.services.credentials import Credentials, generate_credentials

logger = logging.getLogger(__name__)

NATIONAL_ID_RE = re.compile(r'^[0-9]{11}$')

REQUIRED_DOCTOR_FIELDS = (
    'first_name',
    'last_name',
    'national_id',
    'license_number',
    'specialization_code',
    'governorate_code',
    'clinic_address',
    'phone_number',
)
_NAME_FIELDS = ('first_name', 'last_name')
_FREE_TEXT_FIELDS = ('clinic_address', 'sub_specialization', 'institution', 'city')
_CODE_FIELDS = (
    'national_id', 'license_number', 'specialization_code', 'governorate_code',
    'education_code', 'phone_number', 'gender',
)

_DEACTIVATE_ACTIONS = {
    User.ROLE_DOCTOR: AuditEntry.DEACTIVATE_DOCTOR,
    User.ROLE_PATIENT: AuditEntry.DEACTIVATE_PATIENT,
}
_REACTIVATE_ACTIONS = {
    User.ROLE_DOCTOR: AuditEntry.REACTIVATE_DOCTOR,
    User.ROLE_PATIENT: AuditEntry.REACTIVATE_PATIENT,
}
_EXPORT_ACTIONS = {
    User.ROLE_DOCTOR: AuditEntry.EXPORT_DOCTORS,
    User.ROLE_PATIENT: AuditEntry.EXPORT_PATIENTS,
}


def _api_name(field: str) -> str:
    # national_id -> nationalId, as the API spells it
    head, *rest = field.split('_')
    return head + ''.join(p.capitalize() for p in rest)


def _clean_text(value) -> str:
    # tags are dropped; the result is plain text, not HTML
    if value is None:
        return ''
    return html.unescape(bleach.clean(str(value).strip(), tags=set(), strip=True))


def _require_admin(admin: Optional[User]) -> User:
    if not (admin and getattr(admin, 'pk', None) and getattr(admin, 'role', None) == User.ROLE_ADMIN):
        raise PermissionDenied('only administrators may manage accounts')
    return admin


def _require_account_role(role: str) -> str:
    if role not in repositories.ACCOUNT_ROLES:
        raise ValidationError({'role': [f'unknown account role: {role}']})
    return role


# ---------------------------------------------------------------------
# Doctor provisioning
# ---------------------------------------------------------------------
def validate_doctor_input(data: Dict[str, Any], catalogs: CatalogProvider) -> Dict[str, Any]:
    """Return the normalized doctor input or raise a field-level ``ValidationError``."""
    clean: Dict[str, Any] = {}
    for field in _FREE_TEXT_FIELDS:
        clean[field] = _clean_text(data.get(field))
    for field in _NAME_FIELDS + _CODE_FIELDS:
        clean[field] = str(data.get(field) or '').strip()

    errors: Dict[str, list] = {}
    for field in REQUIRED_DOCTOR_FIELDS:
        if not clean[field]:
            errors[field] = ['this field is required']
    # names feed the generated email, so they are kept verbatim or rejected
    for field in _NAME_FIELDS:
        if clean[field] and _clean_text(clean[field]) != clean[field]:
            errors[field] = ['must not contain markup']

    if clean['national_id'] and not NATIONAL_ID_RE.match(clean['national_id']):
        errors['national_id'] = ['national id must be exactly 11 digits']
    if clean['specialization_code'] and not catalogs.is_valid_specialization(clean['specialization_code']):
        errors['specialization_code'] = [f"unknown specialization: {clean['specialization_code']}"]
    if clean['governorate_code'] and not catalogs.is_valid_governorate(clean['governorate_code']):
        errors['governorate_code'] = [f"unknown governorate: {clean['governorate_code']}"]
    if clean['education_code'] and not catalogs.is_valid_education(clean['education_code']):
        errors['education_code'] = [f"unknown education level: {clean['education_code']}"]

    years = data.get('years_of_experience')
    if years is None or years == '':
        clean['years_of_experience'] = 0
    elif isinstance(years, bool):
        errors['years_of_experience'] = ['must be a non-negative integer']
    else:
        try:
            clean['years_of_experience'] = int(years)
        except (TypeError, ValueError):
            errors['years_of_experience'] = ['must be a non-negative integer']
        else:
            if clean['years_of_experience'] < 0 or str(years).strip() != str(clean['years_of_experience']):
                errors['years_of_experience'] = ['must be a non-negative integer']

    clean['date_of_birth'] = data.get('date_of_birth') or None

    if errors:
        raise ValidationError({_api_name(k): v for k, v in errors.items()})
    return clean


def create_doctor(admin: User, data: Dict[str, Any], *,
                  catalogs: Optional[CatalogProvider] = None) -> Tuple[User, Credentials]:
    """Provision an active doctor account with generated credentials.

    Returns the new user and the plaintext credentials; the password is
    stored only as a hash and cannot be recovered afterwards.
    """
    _require_admin(admin)
    catalogs = catalogs or get_catalog_provider()
    v = validate_doctor_input(data, catalogs)

    if repositories.find_by_license_number(v['license_number']):
        logger.warning('create_doctor rejected: duplicate license %s', v['license_number'])
        raise ConflictError({'licenseNumber': ['a doctor with this license number already exists']})
    if repositories.find_by_national_id(User.ROLE_DOCTOR, v['national_id']):
        logger.warning('create_doctor rejected: duplicate national id')
        raise ConflictError({'nationalId': ['a doctor with this national id already exists']})

    credentials = generate_credentials(v['first_name'], v['last_name'], v['license_number'])
    if repositories.find_by_email(User.ROLE_DOCTOR, credentials.email):
        logger.warning('create_doctor rejected: generated email %s already in use', credentials.email)
        raise ConflictError({'email': [f'generated email {credentials.email} is already in use']})

    try:
        with transaction.atomic():
            user = User.objects.create_user(
                username=credentials.email,
                email=credentials.email,
                password=credentials.password,
                first_name=v['first_name'],
                last_name=v['last_name'],
                role=User.ROLE_DOCTOR,
                national_id=v['national_id'],
                created_by=admin,
            )
            DoctorProfile.objects.create(
                user=user,
                license_number=v['license_number'],
                specialization_code=v['specialization_code'],
                sub_specialization=v['sub_specialization'],
                governorate_code=v['governorate_code'],
                city=v['city'],
                clinic_address=v['clinic_address'],
                phone_number=v['phone_number'],
                education_code=v['education_code'],
                years_of_experience=v['years_of_experience'],
                institution=v['institution'],
                gender=v['gender'],
                date_of_birth=v['date_of_birth'],
            )
            specialization = catalogs.resolve_label(SPECIALIZATION, v['specialization_code'])
            append_entry(
                action_code=AuditEntry.ADD_DOCTOR,
                admin=admin,
                description=f"Added doctor {user.display_name} ({specialization})",
                target_role=User.ROLE_DOCTOR,
                target_id=user.id,
                detail={'licenseNumber': v['license_number'], 'email': credentials.email},
            )
    except IntegrityError as exc:
        # a concurrent request committed the same license/national id/email first
        logger.warning('create_doctor lost a uniqueness race: %s', exc)
        raise ConflictError('a doctor with the same license number, national id or email already exists') from exc

    logger.info('doctor %s provisioned by admin=%s', user.id, admin.pk)
    return user, credentials


# ---------------------------------------------------------------------
# Deactivation / reactivation
# ---------------------------------------------------------------------
def deactivate_account(account_id, role: str, reason_code: str, notes: Optional[str], admin: User, *,
                       catalogs: Optional[CatalogProvider] = None) -> User:
    """Move an active account to the inactive state with a recorded reason."""
    _require_admin(admin)
    _require_account_role(role)
    catalogs = catalogs or get_catalog_provider()
    reason_code = (reason_code or '').strip()
    if not catalogs.is_valid_deactivation_reason(reason_code):
        raise ValidationError({'reasonCode': [f'unknown deactivation reason: {reason_code or "(empty)"}']})
    notes = _clean_text(notes)

    with transaction.atomic():
        account = repositories.find_by_id(account_id, role, lock=True)
        if account is None:
            raise NotFoundError(f'{role} {account_id} not found')
        if not account.is_active:
            logger.warning('deactivate rejected: %s %s already inactive', role, account_id)
            raise InvalidStateError(f'{role} {account_id} is already inactive')

        now = timezone.now()
        updated = User.objects.filter(pk=account.pk, role=role, is_active=True).update(
            is_active=False,
            deactivation_reason=reason_code,
            deactivation_notes=notes,
            deactivated_by=admin,
            deactivated_at=now,
        )
        if not updated:
            raise InvalidStateError(f'{role} {account_id} is already inactive')
        account.refresh_from_db()

        reason_label = catalogs.resolve_label(DEACTIVATION_REASON, reason_code)
        append_entry(
            action_code=_DEACTIVATE_ACTIONS[role],
            admin=admin,
            description=f"Deactivated {role} {account.display_name} - reason: {reason_label}",
            target_role=role,
            target_id=account.id,
            detail={'reasonCode': reason_code, 'notes': notes},
        )

    logger.info('%s %s deactivated by admin=%s reason=%s', role, account.id, admin.pk, reason_code)
    return account


def reactivate_account(account_id, role: str, admin: User) -> User:
    """Return an inactive account to the active state.

    The deactivation record is cleared from the account; the audit
    trail keeps the history of who deactivated it and why.
    """
    _require_admin(admin)
    _require_account_role(role)

    with transaction.atomic():
        account = repositories.find_by_id(account_id, role, lock=True)
        if account is None:
            raise NotFoundError(f'{role} {account_id} not found')
        if account.is_active:
            logger.warning('reactivate rejected: %s %s already active', role, account_id)
            raise InvalidStateError(f'{role} {account_id} is already active')

        previous_reason = account.deactivation_reason
        now = timezone.now()
        updated = User.objects.filter(pk=account.pk, role=role, is_active=False).update(
            is_active=True,
            deactivation_reason='',
            deactivation_notes='',
            deactivated_by=None,
            deactivated_at=None,
            reactivated_by=admin,
            reactivated_at=now,
        )
        if not updated:
            raise InvalidStateError(f'{role} {account_id} is already active')
        account.refresh_from_db()

        append_entry(
            action_code=_REACTIVATE_ACTIONS[role],
            admin=admin,
            description=f"Reactivated {role} {account.display_name}",
            target_role=role,
            target_id=account.id,
            detail={'previousReasonCode': previous_reason},
        )

    logger.info('%s %s reactivated by admin=%s', role, account.id, admin.pk)
    return account


def record_export(admin: User, role: str, count: int) -> AuditEntry:
    """Audit an export of the doctor or patient list."""
    _require_admin(admin)
    _require_account_role(role)
    with transaction.atomic():
        return append_entry(
            action_code=_EXPORT_ACTIONS[role],
            admin=admin,
            description=f"Exported {count} {role} records",
            target_role=role,
            detail={'count': count},
        )
