"""
Writes validated StudentRecords into the record store.

Re-uploading a subject for the same term and academic year replaces the
previous scores: every score row for (student, subject, term, year) is deleted
before the new rows go in. Students are matched on (registration id, school);
a student found under another class is moved to the uploading class.
"""
import logging

from reportcards.errors import DuplicateRecordError, StoreError, UploadFailed
from reportcards.models import MAX_SCORE


logger = logging.getLogger(__name__)


def resolve_subject(store, name, class_id, school_id):
    """Find the subject by name in this class, creating it when missing."""
    filters = {"name": name, "class_id": class_id, "school_id": school_id}

    existing = store.find_one("subjects", filters)
    if existing:
        return existing["id"]

    try:
        created = store.insert("subjects", filters)
    except DuplicateRecordError:
        existing = store.find_one("subjects", filters)
        if not existing:
            raise
        return existing["id"]

    logger.info("Created subject %s for class %s", name, class_id)
    return created[0]["id"]


def resolve_student(store, record, class_id, school_id):
    """Return the store id for ``record``'s student, creating or moving it."""
    lookup = {"student_id": record.student_id, "school_id": school_id}

    existing = store.find_one("students", lookup)
    if existing:
        if existing["class_id"] != class_id:
            store.update(
                "students",
                {"id": existing["id"]},
                {"class_id": class_id, "name": record.name}
            )
            logger.info(
                "Moved student %s from class %s to class %s",
                record.student_id, existing["class_id"], class_id
            )
        return existing["id"]

    try:
        created = store.insert("students", {
            "student_id": record.student_id,
            "name": record.name,
            "class_id": class_id,
            "school_id": school_id,
        })
    except DuplicateRecordError:
        # another upload created the same student between our lookup and insert
        retry = store.find_one("students", lookup)
        if not retry:
            raise
        logger.info("Student %s was created concurrently, using it", record.student_id)
        return retry["id"]

    return created[0]["id"]


def replace_scores(store, student_pk, subject_id, record):
    """Delete the student's scores for the period, then insert the new ones."""
    with store.transaction():
        store.delete("scores", {
            "student_id": student_pk,
            "subject_id": subject_id,
            "term": record.term,
            "academic_year": record.academic_year,
        })

        rows = [
            {
                "student_id": student_pk,
                "subject_id": subject_id,
                "assessment_type": assessment_type,
                "score": score,
                "max_score": MAX_SCORE,
                "term": record.term,
                "academic_year": record.academic_year,
            }
            for assessment_type, score in record.scores.items()
        ]

        if rows:
            store.insert("scores", rows)

    logger.debug(
        "Stored %s score(s) for student %s, subject %s",
        len(rows), student_pk, subject_id
    )
    return len(rows)


class ScoreUploader:
    """
    Persists parsed files for one class.

    ``progress`` is called with a 0-100 percentage. The total work is one step
    per file (subject lookup) plus one step per student record.
    """

    def __init__(self, store, school_id, class_id, progress=None):
        self.store = store
        self.school_id = school_id
        self.class_id = class_id
        self.progress = progress
        self._total = 0
        self._done = 0

    def _step(self):
        self._done += 1
        if self.progress and self._total:
            self.progress(round(self._done / self._total * 100))

    def _upload_records(self, records, subject_id):
        saved = 0
        for record in records:
            student_pk = resolve_student(self.store, record, self.class_id, self.school_id)
            replace_scores(self.store, student_pk, subject_id, record)
            saved += 1
            self._step()
        return saved

    def upload_files(self, parsed_files):
        """Bulk path: the subject of each file comes from its filename."""
        self._total = sum(1 + len(f.result.records) for f in parsed_files)
        self._done = 0

        summary = []
        try:
            for parsed in parsed_files:
                subject_id = resolve_subject(
                    self.store, parsed.subject_name, self.class_id, self.school_id
                )
                self._step()

                saved = self._upload_records(parsed.result.records, subject_id)
                summary.append({
                    "filename": parsed.filename,
                    "subject_id": subject_id,
                    "subject_name": parsed.subject_name,
                    "students": saved,
                })
        except StoreError as e:
            logger.exception("Upload for class %s stopped", self.class_id)
            raise UploadFailed() from e

        return summary

    def upload_subject(self, records, subject_id):
        """Single-subject path: the caller already picked the subject."""
        self._total = len(records)
        self._done = 0

        try:
            saved = self._upload_records(records, subject_id)
        except StoreError as e:
            logger.exception("Upload for subject %s stopped", subject_id)
            raise UploadFailed() from e

        return {"subject_id": subject_id, "students": saved}
