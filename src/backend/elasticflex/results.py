"""Search results wrapped into model instances."""

from collections.abc import Sequence

from elasticflex.utils import response_body


def _total_hits(total):
    """Read the hit count from either a bare int or a `{"value": n}` object."""
    if total is None:
        return 0
    if isinstance(total, dict):
        return int(total.get("value", 0))
    return int(total)


class SearchResults(Sequence):
    """
    Ordered model instances built from the hits of a search response.

    The raw response stays available through `response`, along with the total
    hit count, the maximum score and the time the search took.
    """

    def __init__(self, response, model):
        self.response = response
        self.model = model

        body = response_body(response)
        hits = body.get("hits") or {}
        self.total = _total_hits(hits.get("total"))
        self.max_score = hits.get("max_score")
        self.took = body.get("took")
        self.items = [model.new_from_hit(hit) for hit in hits.get("hits", [])]

    def __getitem__(self, index):
        return self.items[index]

    def __len__(self):
        return len(self.items)

    def __repr__(self):
        return f"<SearchResults {self.model.__name__}: {len(self)} of {self.total}>"
