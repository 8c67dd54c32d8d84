"""
Account store lookups used by the lifecycle and statistics services.

Doctors and patients are ``User`` rows partitioned by ``role``; every
lookup here is scoped to one role so that uniqueness and existence
checks never cross the partition.
"""
from typing import Optional

from django.db.models import Q, QuerySet

from accounts.models import User, DoctorProfile

ACCOUNT_ROLES = (User.ROLE_DOCTOR, User.ROLE_PATIENT)

_PROFILE_RELATED = {
    User.ROLE_DOCTOR: 'doctor_profile',
    User.ROLE_PATIENT: 'patient_profile',
}


def accounts_of(role: str) -> QuerySet:
    return User.objects.filter(role=role).select_related(_PROFILE_RELATED[role])


def find_by_id(account_id, role: str, *, lock: bool = False) -> Optional[User]:
    qs = User.objects.filter(role=role)
    if lock:
        # caller must be inside transaction.atomic()
        qs = qs.select_for_update()
    return qs.filter(pk=account_id).first()


def find_by_national_id(role: str, national_id: str) -> Optional[User]:
    return User.objects.filter(role=role, national_id=national_id).first()


def find_by_email(role: str, email: str) -> Optional[User]:
    return User.objects.filter(role=role, email__iexact=email).first()


def find_by_license_number(license_number: str) -> Optional[User]:
    profile = DoctorProfile.objects.select_related('user').filter(license_number__iexact=license_number).first()
    return profile.user if profile else None


def save(user: User, *, update_fields: Optional[list[str]] = None) -> User:
    user.save(update_fields=update_fields)
    return user


def list_accounts(role: str, *, status: Optional[str] = None, q: Optional[str] = None,
                  page: Optional[int] = None, page_size: Optional[int] = None) -> tuple[list[User], int]:
    qs = accounts_of(role)
    if status == 'active':
        qs = qs.filter(is_active=True)
    elif status == 'inactive':
        qs = qs.filter(is_active=False)
    if q:
        cond = Q(first_name__icontains=q) | Q(last_name__icontains=q) | Q(national_id__icontains=q)
        if role == User.ROLE_DOCTOR:
            cond |= Q(doctor_profile__license_number__icontains=q)
        qs = qs.filter(cond)

    total = qs.count()
    qs = qs.order_by('-date_joined', '-id')
    if page and page_size:
        start = (page-1)*page_size
        end = start + page_size
        qs = qs[start:end]
    return list(qs), total
