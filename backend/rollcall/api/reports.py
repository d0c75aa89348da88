"""Instructor reports API endpoints."""
from flask import Blueprint, request

from rollcall.errors import ValidationError
from rollcall.services.report_service import ReportService
from rollcall.utils import dates
from rollcall.utils.decorators import instructor_required
from rollcall.utils.helpers import success_response

reports_bp = Blueprint('reports', __name__)


def _optional_day(name):
    raw = request.args.get(name)
    return dates.parse_day(raw, field=name) if raw else None


def _list_filters():
    return {
        'day': _optional_day('date'),
        'start_date': _optional_day('startDate'),
        'end_date': _optional_day('endDate'),
        'batch_id': request.args.get('batchId') or None,
        'institution': request.args.get('institution') or None,
    }


@reports_bp.route('/attendance', methods=['GET'])
@instructor_required
def attendance_list():
    """Attendance marks filtered by date or date range, batch and institution."""
    records = ReportService.attendance_list(**_list_filters())
    data = {'records': records, 'total': len(records)}
    data.update(ReportService.summarize(records))
    return success_response(data=data)


@reports_bp.route('/attendance/export', methods=['GET'])
@instructor_required
def export_attendance():
    """Export the filtered attendance list as CSV."""
    filters = _list_filters()
    csv_data = ReportService.export_csv(ReportService.attendance_list(**filters))

    if filters['day']:
        suffix = dates.format_day(filters['day'])
    elif filters['start_date'] or filters['end_date']:
        suffix = '_'.join(
            dates.format_day(day) for day in (filters['start_date'], filters['end_date']) if day
        )
    else:
        suffix = dates.format_day(dates.today())
    return csv_data, 200, {
        'Content-Type': 'text/csv; charset=utf-8',
        'Content-Disposition': f'attachment; filename=attendance_{suffix}.csv'
    }


@reports_bp.route('/calendar', methods=['GET'])
@instructor_required
def calendar_counts():
    """Per-day attendance counts for a month."""
    try:
        year = int(request.args.get('year', ''))
        month = int(request.args.get('month', ''))
    except ValueError:
        raise ValidationError('year and month must be integers')

    return success_response(data={
        'year': year,
        'month': month,
        'days': ReportService.calendar_counts(year, month)
    })


@reports_bp.route('/day', methods=['GET'])
@instructor_required
def students_on_day():
    """Students marked present on a date."""
    day = dates.parse_day(request.args.get('date'))
    records = ReportService.attendance_list(
        day=day,
        batch_id=request.args.get('batchId') or None,
        institution=request.args.get('institution') or None
    )
    return success_response(data={'date': dates.format_day(day), 'students': records})
