"""
Record store used by the upload and report code.

The core only ever talks to collections by name through ``find``, ``insert``,
``update`` and ``delete``. Filters are plain dicts: a scalar value is an
equality test, a list/tuple/set is an ``IN`` test. Rows go in and come out as
dicts so callers never hold ORM objects across commits.
"""
import logging
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from reportcards.errors import DuplicateRecordError, StoreError
from reportcards.extensions import db
from reportcards.models import School, Class, Subject, Student, Score


logger = logging.getLogger(__name__)

COLLECTIONS = {
    "schools": School,
    "classes": Class,
    "subjects": Subject,
    "students": Student,
    "scores": Score,
}


class RecordStore:
    """Interface for the collections the report card core reads and writes."""

    def find(self, collection, filters=None):
        raise NotImplementedError

    def insert(self, collection, rows):
        raise NotImplementedError

    def update(self, collection, filters, patch):
        raise NotImplementedError

    def delete(self, collection, filters):
        raise NotImplementedError

    @contextmanager
    def transaction(self):
        yield self

    def find_one(self, collection, filters):
        rows = self.find(collection, filters)
        return rows[0] if rows else None


class SQLAlchemyStore(RecordStore):

    def __init__(self, session=None):
        self.session = session or db.session
        self._depth = 0

    def _model(self, collection):
        try:
            return COLLECTIONS[collection]
        except KeyError:
            raise StoreError(f"Unknown collection: {collection}")

    def _clauses(self, model, filters):
        clauses = []

        for column_name, value in (filters or {}).items():
            column = getattr(model, column_name, None)
            if column is None:
                raise StoreError(
                    f"Unknown column {column_name} on {model.__tablename__}"
                )

            if isinstance(value, (list, tuple, set, frozenset)):
                clauses.append(column.in_(list(value)))
            else:
                clauses.append(column == value)

        return clauses

    def _query(self, collection, filters):
        model = self._model(collection)
        return model, self.session.query(model).filter(
            *self._clauses(model, filters)
        )

    def _commit(self):
        try:
            if self._depth:
                self.session.flush()
            else:
                self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise DuplicateRecordError(str(e.orig)) from e
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreError(str(e)) from e

    @contextmanager
    def transaction(self):
        """Defer commits until the outermost block exits; roll back on error."""
        self._depth += 1
        try:
            yield self
        except Exception:
            if self._depth == 1:
                self.session.rollback()
            raise
        else:
            if self._depth == 1:
                self._depth = 0
                self._commit()
        finally:
            self._depth = max(self._depth - 1, 0)

    def find(self, collection, filters=None):
        try:
            model, query = self._query(collection, filters)
            return [row.to_dict() for row in query.order_by(model.id).all()]
        except SQLAlchemyError as e:
            raise StoreError(str(e)) from e

    def insert(self, collection, rows):
        model = self._model(collection)

        if isinstance(rows, dict):
            rows = [rows]

        objects = [model(**row) for row in rows]
        self.session.add_all(objects)
        self._commit()

        return [obj.to_dict() for obj in objects]

    def update(self, collection, filters, patch):
        try:
            _, query = self._query(collection, filters)
            count = query.update(dict(patch), synchronize_session="fetch")
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreError(str(e)) from e

        self._commit()
        return count

    def delete(self, collection, filters):
        try:
            _, query = self._query(collection, filters)
            count = query.delete(synchronize_session="fetch")
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreError(str(e)) from e

        self._commit()
        logger.debug("Deleted %s row(s) from %s", count, collection)
        return count
