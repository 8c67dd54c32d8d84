import json
from pathlib import Path

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from accounts.catalogs import CATALOGS, DatabaseCatalogProvider
from accounts.models import CatalogEntry


class Command(BaseCommand):
    help = "Load reference catalogs from a JSON file into the database (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument('path', nargs='?', default=None,
                            help="catalog file; defaults to settings.CATALOG_DATA_FILE")

    def handle(self, *args, **opts):
        path = Path(opts['path'] or settings.CATALOG_DATA_FILE)
        try:
            raw = json.loads(path.read_text(encoding='utf-8'))
        except (OSError, ValueError) as e:
            raise CommandError(f"cannot read {path}: {e}") from e

        version = raw.get('version')
        if not version:
            raise CommandError(f"{path} has no catalog version")
        unknown = set(raw.get('catalogs', {})) - set(CATALOGS)
        if unknown:
            raise CommandError(f"unknown catalogs in {path}: {', '.join(sorted(unknown))}")

        created = updated = 0
        with transaction.atomic():
            for catalog, entries in raw['catalogs'].items():
                for order, e in enumerate(entries):
                    _, was_created = CatalogEntry.objects.update_or_create(
                        catalog=catalog, version=version, code=e['code'],
                        defaults={
                            'name_en': e['name_en'],
                            'name_ar': e.get('name_ar', ''),
                            'sort_order': order,
                        },
                    )
                    if was_created:
                        created += 1
                    else:
                        updated += 1

        DatabaseCatalogProvider(version).invalidate()
        self.stdout.write(self.style.SUCCESS(
            f"catalog version {version}: {created} created, {updated} updated"
        ))
