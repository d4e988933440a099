from datetime import datetime

from reportcards.extensions import db

# ---------------- CLASSES ---------------- #

class Class(db.Model):
    __tablename__ = "classes"

    id = db.Column(db.Integer, primary_key=True)

    school_id = db.Column(
        db.Integer,
        db.ForeignKey("schools.id"),
        nullable=False
    )

    name = db.Column(db.String(50), nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint("school_id", "name"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "school_id": self.school_id,
            "name": self.name,
            "created_at": self.created_at,
        }


# ---------------- SUBJECTS ---------------- #

class Subject(db.Model):
    __tablename__ = "subjects"

    id = db.Column(db.Integer, primary_key=True)

    school_id = db.Column(
        db.Integer,
        db.ForeignKey("schools.id"),
        nullable=False
    )

    class_id = db.Column(
        db.Integer,
        db.ForeignKey("classes.id"),
        nullable=False
    )

    name = db.Column(db.String(100), nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint("name", "class_id", "school_id"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "school_id": self.school_id,
            "class_id": self.class_id,
            "name": self.name,
            "created_at": self.created_at,
        }


# ---------------- STUDENTS ---------------- #

class Student(db.Model):
    __tablename__ = "students"

    id = db.Column(db.Integer, primary_key=True)

    school_id = db.Column(
        db.Integer,
        db.ForeignKey("schools.id"),
        nullable=False
    )

    class_id = db.Column(
        db.Integer,
        db.ForeignKey("classes.id"),
        nullable=False
    )

    # registration number assigned by the school, not our primary key
    student_id = db.Column(db.String(64), nullable=False)

    name = db.Column(db.String(150), nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint("student_id", "school_id"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "school_id": self.school_id,
            "class_id": self.class_id,
            "student_id": self.student_id,
            "name": self.name,
            "created_at": self.created_at,
        }
