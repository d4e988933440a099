import threading
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime
from typing import List


@dataclass
class CachedBatch:
    class_id: int
    term: str
    academic_year: str
    name: str
    reports: List = field(default_factory=list)
    generated_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def key(self):
        return (self.class_id, self.term, self.academic_year)

    def metadata(self):
        return {
            "class_id": self.class_id,
            "term": self.term,
            "academic_year": self.academic_year,
            "name": self.name,
            "generated_at": self.generated_at.isoformat(),
            "report_count": len(self.reports),
        }


class ReportCache:
    """
    Generated report batches keyed by (class_id, term, academic_year).

    Keeps insertion order; storing a key again moves it to the end. When
    ``limit`` is set the oldest batches are dropped first.
    """

    def __init__(self, limit=None):
        self.limit = limit
        self._batches = OrderedDict()
        self._lock = threading.Lock()

    def init_app(self, app):
        self.limit = app.config.get("REPORT_CACHE_LIMIT", self.limit)
        self.clear()
        app.extensions["report_cache"] = self

    @staticmethod
    def make_key(class_id, term, academic_year):
        return (class_id, term, academic_year)

    def put(self, class_id, term, academic_year, reports, name=None):
        batch = CachedBatch(
            class_id=class_id,
            term=term,
            academic_year=academic_year,
            name=name or f"Class {class_id} - {term} {academic_year}",
            reports=list(reports),
        )

        with self._lock:
            self._batches.pop(batch.key, None)
            self._batches[batch.key] = batch
            while self.limit and len(self._batches) > self.limit:
                self._batches.popitem(last=False)

        return batch

    def get(self, class_id, term, academic_year):
        with self._lock:
            return self._batches.get(self.make_key(class_id, term, academic_year))

    def list(self):
        with self._lock:
            return list(self._batches.values())

    def delete(self, class_id, term, academic_year):
        with self._lock:
            return self._batches.pop(
                self.make_key(class_id, term, academic_year), None
            ) is not None

    def clear(self):
        with self._lock:
            self._batches.clear()

    def __len__(self):
        return len(self._batches)


report_cache = ReportCache()
