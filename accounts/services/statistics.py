import logging
from typing import Optional

from django.conf import settings
from django.db.models import Count, Q
from django.utils import timezone

from accounts.catalogs import CatalogProvider, get_catalog_provider, SPECIALIZATION, GOVERNORATE
from accounts.models import DoctorProfile, User
from accounts.services.audit import list_entries, format_entry

logger = logging.getLogger(__name__)


def _role_counts(role: str) -> tuple[int, int, int]:
    agg = User.objects.filter(role=role).aggregate(
        total=Count('id'),
        active=Count('id', filter=Q(is_active=True)),
    )
    total = agg['total'] or 0
    active = agg['active'] or 0
    return total, active, total - active


def _label(catalogs: CatalogProvider, catalog: str, code: str) -> str:
    try:
        return catalogs.resolve_label(catalog, code)
    except LookupError:
        # code from an older catalog version; still counted
        return code


def _breakdown(field: str, catalog: str, catalogs: CatalogProvider) -> list[dict]:
    rows = (
        DoctorProfile.objects.values(field)
        .annotate(count=Count('id'), active=Count('id', filter=Q(user__is_active=True)))
        .order_by('-count', field)
    )
    return [
        {
            'code': r[field],
            'label': _label(catalogs, catalog, r[field]),
            'count': r['count'],
            'active': r['active'],
        }
        for r in rows
    ]


def compute_statistics(*, recent_limit: Optional[int] = None,
                       catalogs: Optional[CatalogProvider] = None) -> dict:
    """Aggregate account counts, doctor breakdowns and recent audit activity.

    Computed from the current rows on every call.  Breakdowns list only
    the codes that occur among doctors, ordered by count (desc) then code.
    """
    catalogs = catalogs or get_catalog_provider()
    if recent_limit is None:
        recent_limit = settings.STATISTICS_RECENT_ACTIVITY

    total_d, active_d, inactive_d = _role_counts(User.ROLE_DOCTOR)
    total_p, active_p, inactive_p = _role_counts(User.ROLE_PATIENT)

    data = {
        'totalDoctors': total_d,
        'activeDoctors': active_d,
        'inactiveDoctors': inactive_d,
        'totalPatients': total_p,
        'activePatients': active_p,
        'inactivePatients': inactive_p,
        'specializationStats': _breakdown('specialization_code', SPECIALIZATION, catalogs),
        'governorateStats': _breakdown('governorate_code', GOVERNORATE, catalogs),
        'recentActivity': [format_entry(e) for e in list_entries(limit=recent_limit)] if recent_limit > 0 else [],
        'generatedAt': timezone.now().isoformat(),
    }
    logger.debug('statistics computed: doctors=%s patients=%s', total_d, total_p)
    return data
