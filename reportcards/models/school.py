from datetime import datetime

from reportcards.extensions import db


class School(db.Model):
    __tablename__ = "schools"

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(150), nullable=False)
    slogan = db.Column(db.String(255))

    email = db.Column(db.String(120))
    phone = db.Column(db.String(20))
    address = db.Column(db.Text)

    crest_url = db.Column(db.String(255))

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Relationships
    classes = db.relationship("Class", backref="school", lazy=True)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "slogan": self.slogan,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "crest_url": self.crest_url,
            "created_at": self.created_at,
        }
