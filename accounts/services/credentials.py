"""
Credential generation for administrator-provisioned doctor accounts.

The email is derived deterministically from the doctor's name and
license number; callers must still check it against the account store.
The password is drawn with :mod:`secrets` and is only ever returned to
the caller once; it is persisted as a Django password hash.
"""
import re
import secrets
from dataclasses import dataclass
from typing import Optional

from django.conf import settings

# no 0/O, 1/I/l and their lowercase look-alikes
PASSWORD_ALPHABET = 'ABCDEFGHJKLMNPQRSTUVWXYZabcdefghjkmnpqrstuvwxyz23456789!@#$%'
PASSWORD_LENGTH = 12

_WHITESPACE = re.compile(r'\s+')


@dataclass(frozen=True)
class Credentials:
    email: str
    password: str

    def as_dict(self) -> dict:
        return {'email': self.email, 'password': self.password}


def _normalize(part: str) -> str:
    return _WHITESPACE.sub('', (part or '').lower())


def generate_email(first_name: str, last_name: str, license_number: str, domain: Optional[str] = None) -> str:
    domain = domain or settings.DOCTOR_EMAIL_DOMAIN
    local = '.'.join([_normalize(first_name), _normalize(last_name), _normalize(license_number)])
    return f'{local}@{domain}'


def generate_password(length: int = PASSWORD_LENGTH) -> str:
    return ''.join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))


def generate_credentials(first_name: str, last_name: str, license_number: str) -> Credentials:
    return Credentials(
        email=generate_email(first_name, last_name, license_number),
        password=generate_password(),
    )
