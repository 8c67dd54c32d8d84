"""
Reconcile account states with the audit trail.

Every lifecycle change is written together with its audit entry, so the
latest lifecycle entry of an account must agree with its current state.
Anything else means the account was changed outside the services (e.g.
through the Django admin or raw SQL).
"""
from django.core.management.base import BaseCommand, CommandError

from accounts.models import AuditEntry, User

_LIFECYCLE = {
    User.ROLE_DOCTOR: (AuditEntry.DEACTIVATE_DOCTOR, AuditEntry.REACTIVATE_DOCTOR),
    User.ROLE_PATIENT: (AuditEntry.DEACTIVATE_PATIENT, AuditEntry.REACTIVATE_PATIENT),
}


def find_drift() -> list[str]:
    problems = []
    for role, (deactivate, reactivate) in _LIFECYCLE.items():
        for user in User.objects.filter(role=role).order_by('id').iterator():
            last = (
                AuditEntry.objects.filter(target_role=role, target_id=user.id,
                                          action_code__in=(deactivate, reactivate))
                .order_by('-timestamp', '-id')
                .values_list('action_code', flat=True)
                .first()
            )
            if not user.is_active:
                expected = deactivate
            elif user.reactivated_at:
                expected = reactivate
            else:
                expected = None
            if last != expected:
                problems.append(
                    f"{role} {user.id}: state={'active' if user.is_active else 'inactive'} "
                    f"last lifecycle entry={last or '-'}"
                )
            if role == User.ROLE_DOCTOR and user.created_by_id and not AuditEntry.objects.filter(
                action_code=AuditEntry.ADD_DOCTOR, target_id=user.id
            ).exists():
                problems.append(f"doctor {user.id}: provisioned without an {AuditEntry.ADD_DOCTOR} entry")
    return problems


class Command(BaseCommand):
    help = "Check that every account state is backed by the matching audit entries."

    def handle(self, *args, **opts):
        problems = find_drift()
        for p in problems:
            self.stderr.write(p)
        if problems:
            raise CommandError(f"{len(problems)} account(s) out of sync with the audit trail")
        self.stdout.write(self.style.SUCCESS("accounts and audit trail are consistent"))
