"""
Reference catalogs: specializations, governorates, education levels and
deactivation reasons.

The account services never hold these tables themselves; they ask a
:class:`CatalogProvider` whether a code exists and how to label it.  The
provider in use is chosen by ``settings.CATALOG_PROVIDER`` so that the
data (and its version) can change without touching the services.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Optional

from django.conf import settings
from django.core.cache import cache
from django.utils.module_loading import import_string

from accounts.models import CatalogEntry

SPECIALIZATION = CatalogEntry.SPECIALIZATION
GOVERNORATE = CatalogEntry.GOVERNORATE
EDUCATION = CatalogEntry.EDUCATION
DEACTIVATION_REASON = CatalogEntry.DEACTIVATION_REASON
CATALOGS = (SPECIALIZATION, GOVERNORATE, EDUCATION, DEACTIVATION_REASON)


def _label_field() -> str:
    return 'name_ar' if (settings.LANGUAGE_CODE or '').lower().startswith('ar') else 'name_en'


class CatalogProvider:
    """Read-only lookup over versioned catalogs.

    Subclasses implement :meth:`load`, returning the entries of one
    catalog as dicts with ``code``, ``name_en`` and ``name_ar``.
    """
    version: str = ''

    def load(self, catalog: str) -> list[dict]:
        raise NotImplementedError

    def entries(self, catalog: str) -> list[dict]:
        if catalog not in CATALOGS:
            raise KeyError(f'unknown catalog: {catalog}')
        return self.load(catalog)

    def codes(self, catalog: str) -> frozenset[str]:
        return frozenset(e['code'] for e in self.entries(catalog))

    def is_valid(self, catalog: str, code: Optional[str]) -> bool:
        return bool(code) and code in self.codes(catalog)

    def is_valid_specialization(self, code: Optional[str]) -> bool:
        return self.is_valid(SPECIALIZATION, code)

    def is_valid_governorate(self, code: Optional[str]) -> bool:
        return self.is_valid(GOVERNORATE, code)

    def is_valid_education(self, code: Optional[str]) -> bool:
        return self.is_valid(EDUCATION, code)

    def is_valid_deactivation_reason(self, code: Optional[str]) -> bool:
        return self.is_valid(DEACTIVATION_REASON, code)

    def resolve_label(self, catalog: str, code: str) -> str:
        """Return the display label of ``code``; raise ``LookupError`` if unknown."""
        field = _label_field()
        for e in self.entries(catalog):
            if e['code'] == code:
                return e.get(field) or e.get('name_en') or code
        raise LookupError(f'{catalog}:{code} is not in catalog version {self.version}')


class StaticCatalogProvider(CatalogProvider):
    """Catalogs held in memory, e.g. loaded from the bundled data file."""

    def __init__(self, data: Dict[str, List[dict]], version: str = 'static'):
        self.data = data
        self.version = version

    @classmethod
    def from_file(cls, path: Optional[str] = None) -> 'StaticCatalogProvider':
        raw = json.loads(Path(path or settings.CATALOG_DATA_FILE).read_text(encoding='utf-8'))
        return cls(raw['catalogs'], version=raw['version'])

    def load(self, catalog: str) -> list[dict]:
        return list(self.data.get(catalog, []))


class DatabaseCatalogProvider(CatalogProvider):
    """Catalogs stored as :class:`CatalogEntry` rows, cached per version."""

    def __init__(self, version: Optional[str] = None):
        self.version = version or settings.CATALOG_VERSION

    def cache_key(self, catalog: str) -> str:
        return f'catalog:{self.version}:{catalog}'

    def load(self, catalog: str) -> list[dict]:
        ck = self.cache_key(catalog)
        cached = cache.get(ck)
        if cached is not None:
            return cached
        rows = list(
            CatalogEntry.objects.filter(catalog=catalog, version=self.version)
            .order_by('sort_order', 'code')
            .values('code', 'name_en', 'name_ar')
        )
        cache.set(ck, rows, settings.CATALOG_CACHE_SECONDS)
        return rows

    def invalidate(self) -> None:
        cache.delete_many([self.cache_key(c) for c in CATALOGS])


def get_catalog_provider() -> CatalogProvider:
    """Instantiate the provider configured in ``settings.CATALOG_PROVIDER``."""
    provider_cls = import_string(settings.CATALOG_PROVIDER)
    if provider_cls is StaticCatalogProvider:
        return StaticCatalogProvider.from_file()
    return provider_cls()
