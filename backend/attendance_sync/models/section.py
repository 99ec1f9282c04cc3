"""Section (class) model."""
from attendance_sync import db
from attendance_sync.models.base import BaseModel


class Section(BaseModel):
    """A class section owned by one faculty member."""

    __tablename__ = 'sections'

    name = db.Column(db.String(50), nullable=False, index=True)
    grade = db.Column(db.String(10), nullable=False, index=True)
    faculty_id = db.Column(
        db.String(36), db.ForeignKey('faculty.id', ondelete='CASCADE'), nullable=False, index=True
    )
    student_count = db.Column(db.Integer, default=0, nullable=False)

    # Relationships
    students = db.relationship('Student', backref='section', lazy='dynamic')

    def __repr__(self) -> str:
        return f'<Section {self.grade}-{self.name}>'
