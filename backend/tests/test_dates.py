"""Tests for the attendance calendar clock."""
from datetime import date, timezone

import pytest

from rollcall import create_app
from rollcall.config import TestingConfig
from rollcall.errors import ValidationError
from rollcall.utils import dates


def test_unknown_timezone_fails_at_startup(monkeypatch):
    monkeypatch.setattr(TestingConfig, 'ATTENDANCE_TIMEZONE', 'Mars/Olympus')

    with pytest.raises(ValueError, match='Mars/Olympus'):
        create_app('testing')


def test_named_timezone(monkeypatch):
    monkeypatch.setattr(TestingConfig, 'ATTENDANCE_TIMEZONE', 'Asia/Kolkata')
    app = create_app('testing')

    with app.app_context():
        assert str(dates.attendance_zone()) == 'Asia/Kolkata'
        assert isinstance(dates.today(), date)


def test_utc_default(app):
    assert dates.zone_for(None) is timezone.utc
    assert dates.zone_for('utc') is timezone.utc
    assert dates.attendance_zone() is timezone.utc


def test_parse_day():
    assert dates.parse_day('2025-11-01') == date(2025, 11, 1)
    with pytest.raises(ValidationError):
        dates.parse_day('01/11/2025')
    with pytest.raises(ValidationError):
        dates.parse_day('')
