"""Student registry model."""
from attendance_sync import db
from attendance_sync.models.base import BaseModel


class Student(BaseModel):
    """Student enrolled in exactly one section."""

    __tablename__ = 'students'
    __table_args__ = (
        db.UniqueConstraint('roll_number', 'section_id', name='uq_students_roll_number_section'),
    )

    roll_number = db.Column(db.String(20), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False, index=True)
    section_id = db.Column(
        db.String(36), db.ForeignKey('sections.id', ondelete='CASCADE'), nullable=False, index=True
    )

    # Face Recognition (embedding computed by the external ML service)
    face_embedding = db.Column(db.LargeBinary, nullable=True)

    is_active = db.Column(db.Boolean, default=True, nullable=False, index=True)

    def to_dict(self, exclude: list = None) -> dict:
        """Convert to dictionary; the embedding is reported as a flag only."""
        exclude = (exclude or []) + ['face_embedding']
        result = super().to_dict(exclude=exclude)
        result['face_registered'] = self.face_embedding is not None
        return result

    def __repr__(self) -> str:
        return f'<Student {self.roll_number}>'
