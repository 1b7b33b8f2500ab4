"""Management command to delete the Elasticsearch mapping of a model."""

import sys

from django.core.management.base import BaseCommand

from elasticflex.management.utils import get_indexable_model


class Command(BaseCommand):
    """Delete the index holding the documents of an indexable model."""

    help = "Delete the Elasticsearch index and mapping of an indexable model"

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument("model", help="Model label, as app_label.ModelName")
        parser.add_argument(
            "--force",
            action="store_true",
            help="Force deletion without confirmation",
        )

    def handle(self, *args, **options):
        """Execute the command."""
        model = get_indexable_model(options["model"])
        address = model.get_indexer().address(model)

        if not options["force"]:
            confirm = input(
                f"Are you sure you want to delete the index {address.physical_index}? "
                "This cannot be undone. [y/N] "
            )
            if confirm.lower() != "y":
                self.stdout.write(self.style.WARNING("Operation cancelled"))
                return

        self.stdout.write(f"Deleting index {address.physical_index}...")

        result = model.delete_mapping()
        if result:
            self.stdout.write(
                self.style.SUCCESS(f"Index {address.physical_index} deleted")
            )
        else:
            self.stdout.write(
                self.style.WARNING(
                    f"Index {address.physical_index} not found or already deleted"
                )
            )
            sys.exit(1)
