import logging
from datetime import datetime
from typing import Optional, Any, Dict

from django.utils import timezone

from accounts.exceptions import ValidationError
from accounts.models import AuditEntry, User

logger = logging.getLogger(__name__)

ACTION_CODES = frozenset(code for code, _ in AuditEntry.ACTION_CHOICES)


def _next_timestamp() -> datetime:
    # never earlier than the latest entry, so insertion order stays non-decreasing
    now = timezone.now()
    last = AuditEntry.objects.order_by('-timestamp').values_list('timestamp', flat=True).first()
    return max(now, last) if last else now


def append_entry(*, action_code: str, admin: Optional[User], description: str,
                 target_role: str = '', target_id: Optional[int] = None,
                 detail: Optional[Dict[str, Any]] = None) -> AuditEntry:
    errors = {}
    if not action_code:
        errors['actionCode'] = ['this field is required']
    elif action_code not in ACTION_CODES:
        errors['actionCode'] = [f'unknown action code: {action_code}']
    if admin is None or getattr(admin, 'pk', None) is None:
        errors['adminId'] = ['this field is required']
    if errors:
        raise ValidationError(errors)

    entry = AuditEntry.objects.create(
        action_code=action_code,
        description=description,
        admin=admin,
        admin_name=admin.display_name,
        target_role=target_role or '',
        target_id=target_id,
        detail=detail or {},
        timestamp=_next_timestamp(),
    )
    logger.info('audit %s by admin=%s target=%s:%s', action_code, admin.pk, target_role or '-', target_id or '-')
    return entry


def list_entries(*, action_code: Optional[str] = None, since: Optional[datetime] = None,
                 until: Optional[datetime] = None, limit: Optional[int] = None) -> list[AuditEntry]:
    """Return audit entries, most recent first.

    Ties on ``timestamp`` keep reverse insertion order; filters only
    narrow the result and never change that order.
    """
    qs = AuditEntry.objects.select_related('admin')
    if action_code:
        qs = qs.filter(action_code=action_code)
    if since:
        qs = qs.filter(timestamp__gte=since)
    if until:
        qs = qs.filter(timestamp__lte=until)
    qs = qs.order_by('-timestamp', '-id')
    if limit:
        qs = qs[:limit]
    return list(qs)


def format_entry(entry: AuditEntry) -> dict:
    return {
        'id': entry.id,
        'actionCode': entry.action_code,
        'description': entry.description,
        'adminId': entry.admin_id,
        'adminName': entry.admin_name,
        'targetRole': entry.target_role or None,
        'targetId': entry.target_id,
        'detail': entry.detail,
        'timestamp': entry.timestamp.isoformat(),
    }
