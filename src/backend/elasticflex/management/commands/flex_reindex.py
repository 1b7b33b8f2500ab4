"""Management command to bulk index the rows of a model in Elasticsearch."""

from django.core.management.base import BaseCommand, CommandError

from elasticflex.bulk import bulk_index, bulk_reindex
from elasticflex.management.utils import get_indexable_model
from elasticflex.utils import response_body


class Command(BaseCommand):
    """Index every row of an indexable model, one bulk request per batch."""

    help = "Index every row of an indexable model in Elasticsearch"

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument("model", help="Model label, as app_label.ModelName")
        parser.add_argument(
            "--batch-size",
            type=int,
            default=500,
            help="Number of rows sent in each bulk request",
        )
        parser.add_argument(
            "--remove-first",
            action="store_true",
            help="Delete the documents of each batch before indexing them",
        )

    # pylint: disable=protected-access
    def handle(self, *args, **options):
        """Execute the command."""
        model = get_indexable_model(options["model"])
        batch_size = options["batch_size"]
        if batch_size < 1:
            raise CommandError("--batch-size must be a positive integer")

        send = bulk_reindex if options["remove_first"] else bulk_index
        queryset = model.objects.order_by("pk")
        total = queryset.count()

        self.stdout.write(f"Indexing {total} {model._meta.verbose_name_plural}...")

        processed = 0
        failed = 0
        last_pk = None
        while True:
            # Page on the primary key so rows deleted meanwhile shift nothing
            page = queryset if last_pk is None else queryset.filter(pk__gt=last_pk)
            batch = list(page[:batch_size])
            if not batch:
                break
            response = send(batch)
            failed += _count_item_errors(response)
            processed += len(batch)
            last_pk = batch[-1].pk
            self.stdout.write(f"Progress: {processed}/{total} rows processed")

        if failed:
            self.stdout.write(
                self.style.ERROR(
                    f"Indexing completed: {processed - failed} succeeded, {failed} failed"
                )
            )
        else:
            self.stdout.write(
                self.style.SUCCESS(f"Indexing completed: {processed} succeeded")
            )


def _count_item_errors(response):
    """Count the items reported as failed in a bulk response."""
    if not response:
        return 0
    body = response_body(response)
    if not body.get("errors"):
        return 0
    return sum(
        1
        for item in body.get("items", [])
        for result in item.values()
        if result.get("error")
    )
