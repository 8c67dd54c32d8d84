import pytest

from accounts.catalogs import (
    DatabaseCatalogProvider,
    StaticCatalogProvider,
    get_catalog_provider,
    SPECIALIZATION,
    DEACTIVATION_REASON,
)
from accounts.models import CatalogEntry


def test_static_provider_from_bundled_file():
    provider = StaticCatalogProvider.from_file()
    assert provider.version == '2024.1'
    assert provider.is_valid_specialization('cardiologist')
    assert provider.is_valid_governorate('aleppo')
    assert provider.is_valid_education('phd')
    assert provider.is_valid_deactivation_reason('retirement')
    assert not provider.is_valid_specialization('astrologer')
    assert not provider.is_valid_specialization('')
    assert not provider.is_valid_specialization(None)


def test_resolve_label_and_unknown_code():
    provider = StaticCatalogProvider({SPECIALIZATION: [
        {'code': 'cardiologist', 'name_en': 'Cardiologist', 'name_ar': 'طبيب قلب'},
    ]})
    assert provider.resolve_label(SPECIALIZATION, 'cardiologist') == 'Cardiologist'
    with pytest.raises(LookupError):
        provider.resolve_label(SPECIALIZATION, 'astrologer')
    assert provider.codes(DEACTIVATION_REASON) == frozenset()


def test_arabic_labels(settings):
    settings.LANGUAGE_CODE = 'ar'
    provider = StaticCatalogProvider.from_file()
    assert provider.resolve_label(SPECIALIZATION, 'cardiologist') == 'طبيب قلب'


def test_unknown_catalog_name():
    with pytest.raises(KeyError):
        StaticCatalogProvider.from_file().entries('blood_type')


def test_get_catalog_provider_uses_settings(settings):
    settings.CATALOG_PROVIDER = 'accounts.catalogs.StaticCatalogProvider'
    assert isinstance(get_catalog_provider(), StaticCatalogProvider)


@pytest.mark.django_db
def test_database_provider_reads_loaded_catalogs(catalogs):
    assert isinstance(catalogs, DatabaseCatalogProvider)
    assert catalogs.version == '2024.1'
    assert catalogs.is_valid_specialization('neurologist')
    assert catalogs.resolve_label(DEACTIVATION_REASON, 'retirement') == 'Retirement'


@pytest.mark.django_db
def test_database_provider_is_scoped_to_version(catalogs):
    other = DatabaseCatalogProvider(version='1999.1')
    assert not other.is_valid_specialization('cardiologist')


@pytest.mark.django_db
def test_database_provider_caches_until_invalidated(catalogs):
    assert catalogs.is_valid_specialization('cardiologist')
    CatalogEntry.objects.filter(code='cardiologist').delete()
    assert catalogs.is_valid_specialization('cardiologist')
    catalogs.invalidate()
    assert not catalogs.is_valid_specialization('cardiologist')
