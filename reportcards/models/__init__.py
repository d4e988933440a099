from reportcards.models.school import School
from reportcards.models.academic import Class, Subject, Student
from reportcards.models.assessment import Score, MAX_SCORE

__all__ = ["School", "Class", "Subject", "Student", "Score", "MAX_SCORE"]
