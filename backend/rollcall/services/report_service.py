"""Instructor-facing attendance reports."""
import calendar
import io
from datetime import date
from typing import Dict, List

import pandas as pd
from sqlalchemy import func

from rollcall import db
from rollcall.errors import ValidationError
from rollcall.models.attendance import AttendanceRecord
from rollcall.models.batch import Batch
from rollcall.models.student import Student
from rollcall.utils.dates import isoformat, format_day

EXPORT_COLUMNS = ['Date', 'Time', 'Name', 'Email', 'Institution', 'Batch']


class ReportService:
    """Queries over the attendance ledger for dashboards and exports."""

    @staticmethod
    def attendance_list(
        day: date = None,
        batch_id: str = None,
        institution: str = None,
        start_date: date = None,
        end_date: date = None
    ) -> List[Dict]:
        """Attendance marks, newest first, optionally filtered.

        ``start_date`` and ``end_date`` bound an inclusive range of days and
        may be given separately.
        """
        if start_date and end_date and start_date > end_date:
            raise ValidationError('startDate must not be after endDate')

        query = (
            db.session.query(AttendanceRecord, Student, Batch)
            .join(Student, AttendanceRecord.student_id == Student.id)
            .join(Batch, AttendanceRecord.batch_id == Batch.id)
        )
        if day:
            query = query.filter(AttendanceRecord.day == day)
        if start_date:
            query = query.filter(AttendanceRecord.day >= start_date)
        if end_date:
            query = query.filter(AttendanceRecord.day <= end_date)
        if batch_id:
            query = query.filter(AttendanceRecord.batch_id == batch_id)
        if institution:
            query = query.filter(Batch.institution == institution)

        rows = query.order_by(
            AttendanceRecord.day.desc(),
            AttendanceRecord.created_at.desc(),
            AttendanceRecord.id
        ).all()

        return [
            {
                'attendanceId': record.id,
                'date': format_day(record.day),
                'timestamp': isoformat(record.created_at),
                'studentId': student.id,
                'name': student.name,
                'email': student.email,
                'avatarUrl': student.avatar_url,
                'institution': batch.institution,
                'batchId': batch.id,
                'batchName': batch.name,
            }
            for record, student, batch in rows
        ]

    @staticmethod
    def summarize(records: List[Dict]) -> Dict[str, int]:
        """Totals shown above the attendance list."""
        return {
            'totalRecords': len(records),
            'uniqueStudents': len({record['studentId'] for record in records}),
            'uniqueDates': len({record['date'] for record in records}),
        }

    @staticmethod
    def calendar_counts(year: int, month: int) -> Dict[str, int]:
        """Number of marks per day of a month, only days with attendance."""
        if month < 1 or month > 12:
            raise ValidationError('month must be between 1 and 12')
        if year < 1 or year > 9999:
            raise ValidationError('year is out of range')

        first = date(year, month, 1)
        last = date(year, month, calendar.monthrange(year, month)[1])
        rows = (
            db.session.query(AttendanceRecord.day, func.count(AttendanceRecord.id))
            .filter(AttendanceRecord.day >= first, AttendanceRecord.day <= last)
            .group_by(AttendanceRecord.day)
            .order_by(AttendanceRecord.day)
            .all()
        )
        return {format_day(day): count for day, count in rows}

    @staticmethod
    def export_csv(records: List[Dict]) -> str:
        """Render an attendance list as CSV."""
        data = []
        for record in records:
            timestamp = pd.Timestamp(record['timestamp'])
            data.append({
                'Date': record['date'],
                'Time': timestamp.strftime('%H:%M:%S'),
                'Name': record['name'],
                'Email': record['email'],
                'Institution': record['institution'],
                'Batch': record['batchName'],
            })

        df = pd.DataFrame(data, columns=EXPORT_COLUMNS)

        output = io.StringIO()
        df.to_csv(output, index=False)
        output.seek(0)
        return output.getvalue()
