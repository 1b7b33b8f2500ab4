"""Management command to rebuild the Elasticsearch mapping of a model."""

from django.core.management.base import BaseCommand

from elasticflex.management.utils import get_indexable_model


class Command(BaseCommand):
    """Drop and define again the mapping of an indexable model."""

    help = "Drop and define again the Elasticsearch mapping of an indexable model"

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument("model", help="Model label, as app_label.ModelName")

    def handle(self, *args, **options):
        """Execute the command."""
        model = get_indexable_model(options["model"])
        address = model.get_indexer().address(model)

        self.stdout.write(f"Rebuilding mapping of {address.physical_index}...")
        model.rebuild_mapping()
        self.stdout.write(
            self.style.SUCCESS(f"Mapping of {address.physical_index} rebuilt")
        )
