"""Domain services for VidTube."""

from vidtube.domain.services.account_validation import (
    check_field_lengths,
    required_field_errors,
    validate_email_address,
)
from vidtube.domain.services.profile_service import ProfileService
from vidtube.domain.services.session_service import SessionService

__all__ = [
    "ProfileService",
    "SessionService",
    "check_field_lengths",
    "required_field_errors",
    "validate_email_address",
]
