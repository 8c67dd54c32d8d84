import io
import itertools

import pytest
from django.core.cache import cache
from django.core.management import call_command
from rest_framework.test import APIClient

from accounts.catalogs import get_catalog_provider
from accounts.models import User, PatientProfile

_national_ids = itertools.count(10000000001)


@pytest.fixture(autouse=True)
def _clear_cache():
    # catalog lookups and throttles are cached
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def catalogs(db):
    call_command('load_catalogs', stdout=io.StringIO())
    return get_catalog_provider()


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        username='admin1', password='P@ssw0rd1', role='admin', first_name='Rana', last_name='Haddad',
    )


@pytest.fixture
def admin_client(admin_user):
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client


@pytest.fixture
def doctor_data():
    """Service-level input for a valid doctor; override keys per test."""
    def _make(**overrides):
        data = {
            'first_name': 'Omar',
            'last_name': 'Said',
            'national_id': str(next(_national_ids)),
            'license_number': 'L900',
            'specialization_code': 'cardiologist',
            'governorate_code': 'damascus',
            'clinic_address': 'Baghdad St. 12',
            'phone_number': '+963911000000',
        }
        data.update(overrides)
        return data
    return _make


@pytest.fixture
def make_patient(db):
    def _make(first_name='Lina', last_name='Khoury', **profile):
        nid = str(next(_national_ids))
        user = User.objects.create_user(
            username=f'patient{nid}', password='P@ssw0rd1', role='patient',
            first_name=first_name, last_name=last_name, national_id=nid,
            email=f'patient{nid}@example.com',
        )
        PatientProfile.objects.create(user=user, **profile)
        return user
    return _make
