from typing import Optional

from fastapi import Depends, Request

from .config import AUTH_SUBJECT_HEADER
from .errors import AuthenticationRequired


def get_auth_subject(request: Request) -> Optional[str]:
    """Principal id forwarded by the identity gateway, if any."""
    subject = request.headers.get(AUTH_SUBJECT_HEADER, "").strip()
    return subject or None


def require_subject(subject: Optional[str] = Depends(get_auth_subject)) -> str:
    if not subject:
        raise AuthenticationRequired()
    return subject
