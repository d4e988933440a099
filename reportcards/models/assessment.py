from datetime import datetime

from reportcards.extensions import db


MAX_SCORE = 100


# ---------------- SCORES ---------------- #

class Score(db.Model):
    __tablename__ = "scores"

    id = db.Column(db.Integer, primary_key=True)

    student_id = db.Column(
        db.Integer,
        db.ForeignKey("students.id"),
        nullable=False
    )

    subject_id = db.Column(
        db.Integer,
        db.ForeignKey("subjects.id"),
        nullable=False
    )

    assessment_type = db.Column(db.String(100), nullable=False)

    score = db.Column(db.Float, default=0)

    max_score = db.Column(db.Float, default=MAX_SCORE)

    term = db.Column(db.String(20), nullable=False)

    academic_year = db.Column(db.String(20), nullable=False)

    created_at = db.Column(
        db.DateTime,
        default=datetime.utcnow
    )

    __table_args__ = (
        db.Index(
            "ix_scores_student_subject_period",
            "student_id", "subject_id", "term", "academic_year"
        ),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "student_id": self.student_id,
            "subject_id": self.subject_id,
            "assessment_type": self.assessment_type,
            "score": self.score,
            "max_score": self.max_score,
            "term": self.term,
            "academic_year": self.academic_year,
            "created_at": self.created_at,
        }
