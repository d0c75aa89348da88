"""Validation utilities for request payloads."""
import re
from typing import Dict, List, Any, Optional

from rollcall.errors import ValidationError


class Validator:
    """Validation helper class."""

    @staticmethod
    def validate_email(email: str) -> bool:
        """Validate email format."""
        if not email:
            return False
        pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
        return bool(re.match(pattern, email))

    @staticmethod
    def validate_name(name: str, label: str = 'Name') -> Dict[str, Any]:
        """Validate a display name."""
        errors = []

        if not name or not name.strip():
            errors.append(f"{label} is required")
        elif len(name.strip()) < 2:
            errors.append(f"{label} must be at least 2 characters long")
        elif len(name.strip()) > 100:
            errors.append(f"{label} is too long")

        return {
            "is_valid": len(errors) == 0,
            "errors": errors
        }

    @staticmethod
    def validate_required_fields(data: Dict, required_fields: List[str]) -> Dict[str, Any]:
        """Validate required fields in data."""
        errors = []

        for field in required_fields:
            if field not in data or not data[field]:
                errors.append(f"{field} is required")

        return {
            "is_valid": len(errors) == 0,
            "errors": errors
        }

    @staticmethod
    def require(data: Optional[Dict], required_fields: List[str]) -> Dict:
        """Return ``data`` or raise ``ValidationError`` listing missing fields."""
        if not isinstance(data, dict):
            raise ValidationError("Request body must be JSON")

        result = Validator.validate_required_fields(data, required_fields)
        if not result["is_valid"]:
            raise ValidationError("; ".join(result["errors"]))

        wrong_type = [field for field in required_fields if not isinstance(data[field], str)]
        if wrong_type:
            raise ValidationError("; ".join(f"{field} must be a string" for field in wrong_type))
        return data

    @staticmethod
    def optional_string(data: Dict, field: str) -> Optional[str]:
        """Value of an optional string field, ``None`` when absent or empty."""
        value = data.get(field)
        if value in (None, ''):
            return None
        if not isinstance(value, str):
            raise ValidationError(f"{field} must be a string")
        return value

    @staticmethod
    def parse_limit(value, default: int, maximum: int) -> int:
        """Parse a page-size style ``limit`` parameter."""
        if value in (None, ''):
            return default
        try:
            limit = int(value)
        except (TypeError, ValueError):
            raise ValidationError("limit must be an integer")
        if limit < 1 or limit > maximum:
            raise ValidationError(f"limit must be between 1 and {maximum}")
        return limit
