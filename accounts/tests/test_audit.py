from datetime import timedelta

import pytest
from django.utils import timezone

from accounts.exceptions import ValidationError
from accounts.models import AuditEntry, ImmutableAuditEntryError
from accounts.services import audit
from accounts.services.audit import append_entry, format_entry, list_entries

pytestmark = pytest.mark.django_db


def _append(admin, action=AuditEntry.EXPORT_DOCTORS, **kw):
    return append_entry(action_code=action, admin=admin, description=f'{action} test', **kw)


def test_append_requires_known_action_code(admin_user):
    with pytest.raises(ValidationError) as exc:
        append_entry(action_code='DELETE_EVERYTHING', admin=admin_user, description='x')
    assert 'actionCode' in exc.value.detail
    with pytest.raises(ValidationError):
        append_entry(action_code='', admin=admin_user, description='x')
    assert not AuditEntry.objects.exists()


def test_append_requires_admin():
    with pytest.raises(ValidationError) as exc:
        append_entry(action_code=AuditEntry.EXPORT_DOCTORS, admin=None, description='x')
    assert 'adminId' in exc.value.detail


def test_entries_cannot_be_changed_or_removed(admin_user):
    entry = _append(admin_user)
    entry.description = 'rewritten'
    with pytest.raises(ImmutableAuditEntryError):
        entry.save()
    with pytest.raises(ImmutableAuditEntryError):
        entry.delete()
    with pytest.raises(ImmutableAuditEntryError):
        AuditEntry.objects.filter(pk=entry.pk).update(description='rewritten')
    with pytest.raises(ImmutableAuditEntryError):
        AuditEntry.objects.all().delete()
    assert AuditEntry.objects.get(pk=entry.pk).description == f'{AuditEntry.EXPORT_DOCTORS} test'


def test_list_is_most_recent_first_and_ties_keep_reverse_insertion(admin_user, monkeypatch):
    fixed = timezone.now()
    monkeypatch.setattr(audit.timezone, 'now', lambda: fixed)
    first = _append(admin_user, AuditEntry.EXPORT_DOCTORS)
    second = _append(admin_user, AuditEntry.EXPORT_PATIENTS)
    third = _append(admin_user, AuditEntry.EXPORT_DOCTORS)
    assert first.timestamp == second.timestamp == third.timestamp
    assert [e.id for e in list_entries()] == [third.id, second.id, first.id]


def test_timestamps_never_go_backwards(admin_user):
    future = timezone.now() + timedelta(hours=1)
    AuditEntry.objects.create(
        action_code=AuditEntry.EXPORT_DOCTORS, description='clock skew', admin=admin_user,
        admin_name='x', timestamp=future,
    )
    entry = _append(admin_user)
    assert entry.timestamp >= future
    assert list_entries()[0].id == entry.id


def test_filters_narrow_without_reordering(admin_user):
    a = _append(admin_user, AuditEntry.EXPORT_DOCTORS)
    _append(admin_user, AuditEntry.EXPORT_PATIENTS)
    c = _append(admin_user, AuditEntry.EXPORT_DOCTORS)

    assert [e.id for e in list_entries(action_code=AuditEntry.EXPORT_DOCTORS)] == [c.id, a.id]
    assert [e.id for e in list_entries(limit=1)] == [c.id]
    assert list_entries(since=timezone.now() + timedelta(days=1)) == []
    assert len(list_entries(until=timezone.now() + timedelta(days=1))) == 3


def test_format_entry(admin_user):
    entry = _append(admin_user, target_role='patient', target_id=5, detail={'count': 3})
    data = format_entry(entry)
    assert data['actionCode'] == AuditEntry.EXPORT_DOCTORS
    assert data['adminId'] == admin_user.id
    assert data['adminName'] == 'Rana Haddad'
    assert data['targetRole'] == 'patient'
    assert data['targetId'] == 5
    assert data['detail'] == {'count': 3}
    assert data['timestamp'] == entry.timestamp.isoformat()
