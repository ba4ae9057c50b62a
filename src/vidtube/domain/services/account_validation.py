"""Input checks shared by registration and profile updates."""

from email_validator import EmailNotValidError, validate_email

from vidtube.core.exceptions import ValidationError


def validate_email_address(email: str) -> str:
    """Check email syntax and return it trimmed and lowercased.

    Deliverability (DNS) is not checked.

    Raises:
        ValidationError: If the address is not syntactically valid.
    """
    candidate = email.strip()
    try:
        validate_email(candidate, check_deliverability=False)
    except EmailNotValidError as e:
        raise ValidationError(
            "Invalid email address",
            details=[{"field": "email", "message": str(e), "code": "invalid_email"}],
        ) from e
    return candidate.lower()


def required_field_errors(fields: list[str]) -> list[dict]:
    """Error details for required fields that were left blank."""
    return [
        {"field": name, "message": f"{name} is required", "code": "required"}
        for name in fields
    ]


# Column widths of the users table
MAX_FIELD_LENGTHS = {
    "username": 64,
    "email": 255,
    "fullname": 255,
}


def check_field_lengths(**values: str | None) -> None:
    """Reject values longer than the column that stores them.

    Raises:
        ValidationError: If any value is too long.
    """
    errors = [
        {
            "field": name,
            "message": f"{name} must be at most {MAX_FIELD_LENGTHS[name]} characters",
            "code": "too_long",
        }
        for name, value in values.items()
        if value is not None and len(value.strip()) > MAX_FIELD_LENGTHS[name]
    ]
    if errors:
        raise ValidationError("Field value is too long", details=errors)
