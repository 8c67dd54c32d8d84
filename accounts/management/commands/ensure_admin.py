from django.core.management.base import BaseCommand, CommandError
from rest_framework.authtoken.models import Token

from accounts import repositories
from accounts.models import User
from accounts.services.credentials import generate_password


class Command(BaseCommand):
    help = "Ensure an administrator account exists and print its API token (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument('username', nargs='?', default='admin')
        parser.add_argument('--password', default=None,
                            help="set this password; a random one is generated for new accounts otherwise")
        parser.add_argument('--first-name', default='System')
        parser.add_argument('--last-name', default='Administrator')

    def handle(self, *args, **opts):
        username = opts['username']
        password = opts['password']
        user, created = User.objects.get_or_create(
            username=username,
            defaults={
                'role': User.ROLE_ADMIN,
                'first_name': opts['first_name'],
                'last_name': opts['last_name'],
                'is_staff': True,
            },
        )
        if not created:
            # role and lifecycle state only change through the audited services
            if user.role != User.ROLE_ADMIN:
                raise CommandError(f"{username} is a {user.role} account, not an administrator")
            if not user.is_active:
                raise CommandError(f"administrator {username} is inactive")
        if created and not password:
            password = generate_password()
        if password:
            user.set_password(password)
        user.is_staff = True
        repositories.save(user)

        token, _ = Token.objects.get_or_create(user=user)
        self.stdout.write(self.style.SUCCESS(f"ok: {username} ({'created' if created else 'updated'})"))
        if created and not opts['password']:
            self.stdout.write(f"password: {password}")
        self.stdout.write(f"token: {token.key}")
