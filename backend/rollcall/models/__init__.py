"""Models package with all models."""
from .base import BaseModel
from .instructor import Instructor
from .batch import Batch
from .student import Student
from .enrollment import Enrollment
from .daily_token import DailyToken
from .attendance import AttendanceRecord

__all__ = [
    'BaseModel', 'Instructor', 'Batch', 'Student',
    'Enrollment', 'DailyToken', 'AttendanceRecord'
]
