"""
Management command to add a JSON 'files' column to a model's table.
Run: python manage.py add_file_field Invoice
     python manage.py add_file_field billing.Invoice
     python manage.py add_file_field Invoice --app billing

Generates an empty migration with makemigrations, then injects an AddField
operation for a nullable JSONField named 'files' into it.
"""
import importlib
import logging
import re
from pathlib import Path
from typing import Optional

from django.apps import apps
from django.core.management import call_command
from django.core.management.base import BaseCommand
from django.db.migrations.loader import MigrationLoader

from model_file_manager.exceptions import MigrationFileNotFound

logger = logging.getLogger(__name__)

OPERATIONS_OPENING = 'operations = ['
MIGRATIONS_IMPORT = 'from django.db import migrations\n'
MIGRATIONS_MODELS_IMPORT = 'from django.db import migrations, models\n'

FILES_FIELD_OPERATION = (
    "\n        migrations.AddField(\n"
    "            model_name='{model_name}',\n"
    "            name='files',\n"
    "            field=models.JSONField(blank=True, null=True),\n"
    "        ),"
)


# Common nouns whose plural does not follow the suffix rules below
IRREGULAR_PLURALS = {
    'child': 'children',
    'foot': 'feet',
    'goose': 'geese',
    'man': 'men',
    'mouse': 'mice',
    'person': 'people',
    'tooth': 'teeth',
    'woman': 'women',
}

UNCOUNTABLE = {'equipment', 'information', 'media', 'news', 'series', 'species'}


def pluralize(word: str) -> str:
    """English plural for table names: invoice -> invoices, category -> categories."""
    if not word or word in UNCOUNTABLE:
        return word
    if word in IRREGULAR_PLURALS:
        return IRREGULAR_PLURALS[word]
    if re.search(r'[^aeiou]y$', word):
        return word[:-1] + 'ies'
    if re.search(r'(s|x|z|ch|sh)$', word):
        return word + 'es'
    return word + 's'


def add_json_field_to_migration(migration_path: Path, model_name: str) -> bool:
    """
    Insert the 'files' AddField right after the operations list opens.

    Returns:
        False when the file has no operations list to patch
    """
    content = migration_path.read_text(encoding='utf-8')
    if OPERATIONS_OPENING not in content:
        return False

    content = content.replace(
        OPERATIONS_OPENING,
        OPERATIONS_OPENING + FILES_FIELD_OPERATION.format(model_name=model_name.lower()),
        1,
    )
    if MIGRATIONS_MODELS_IMPORT not in content:
        content = content.replace(MIGRATIONS_IMPORT, MIGRATIONS_MODELS_IMPORT, 1)

    migration_path.write_text(content, encoding='utf-8')
    return True


class Command(BaseCommand):
    help = "Generate a migration to add a JSON 'files' field to the specified model's table"

    def add_arguments(self, parser):
        parser.add_argument('model', help="Model name, optionally prefixed with its app label")
        parser.add_argument('--app', dest='app_label', help="App the model belongs to")

    def handle(self, *args, **options):
        model_name = options['model']
        app_label = options.get('app_label')

        if '.' in model_name:
            prefix, model_name = model_name.rsplit('.', 1)
            app_label = app_label or prefix

        table_name = pluralize(model_name.lower())

        app_label = app_label or self.find_app_label(model_name)
        if not app_label:
            self.stderr.write(self.style.ERROR(
                f"Could not determine the app for model '{model_name}'. Pass --app."
            ))
            return

        try:
            apps.get_app_config(app_label)
        except LookupError:
            self.stderr.write(self.style.ERROR(f"No installed app with label '{app_label}'."))
            return

        call_command(
            'makemigrations',
            app_label,
            empty=True,
            name=f"add_files_field_to_{table_name}_table",
            stdout=self.stdout,
        )

        try:
            migration_path = self.get_latest_migration_file(app_label)
        except MigrationFileNotFound as e:
            logger.error(str(e))
            self.stderr.write(self.style.ERROR("Failed to find the migration file."))
            return

        if not add_json_field_to_migration(migration_path, model_name):
            self.stderr.write(self.style.WARNING(
                f"{migration_path.name} has no operations list; 'files' field was not added."
            ))
            return

        logger.info(f"Added 'files' field for {model_name} to {migration_path}")
        self.stdout.write(self.style.SUCCESS(
            f"Migration to add 'files' field to {table_name} table has been created and updated."
        ))
        self.stdout.write(f"  {migration_path}")

    def find_app_label(self, model_name: str) -> Optional[str]:
        """App label of the single installed model with this name, if any."""
        labels = {
            model._meta.app_label
            for model in apps.get_models()
            if model.__name__.lower() == model_name.lower()
        }
        if len(labels) == 1:
            return labels.pop()
        if labels:
            self.stderr.write(self.style.WARNING(
                f"Model '{model_name}' exists in several apps: {', '.join(sorted(labels))}"
            ))
        return None

    def get_migrations_dir(self, app_label: str) -> Path:
        module_name, _ = MigrationLoader.migrations_module(app_label)
        importlib.invalidate_caches()
        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            raise MigrationFileNotFound(f"No migrations package for '{app_label}'") from e
        return Path(module.__file__).resolve().parent

    def get_latest_migration_file(self, app_label: str) -> Path:
        """
        Last migration script in name order.

        Django's zero-padded numbering makes this the newest one, unless
        several migrations are being written at the same time.
        """
        migrations_dir = self.get_migrations_dir(app_label)
        migration_files = sorted(
            path for path in migrations_dir.glob('*.py') if path.name != '__init__.py'
        )
        if not migration_files:
            raise MigrationFileNotFound(f"No migration files in {migrations_dir}")
        return migration_files[-1]
