"""API Dependencies - Session guards"""
from typing import Optional

from fastapi import HTTPException, status

from application.session import SessionStore
from domain.value_objects import Redirect


def redirect_exception(redirect: Redirect, status_code: int = status.HTTP_401_UNAUTHORIZED) -> HTTPException:
    """HTTPException telling the caller where the page wants to go"""
    return HTTPException(
        status_code=status_code,
        detail={
            "message": "Authentication required" if status_code == 401 else "Administrator access required",
            "redirect": redirect.path,
            "return_to": redirect.return_to,
        }
    )


def guard(redirect: Optional[Redirect], session: SessionStore) -> None:
    """Turn a page's login redirect into 401, or 403 for a logged-in non-admin"""
    if redirect is None:
        return
    if session.is_authenticated:
        raise redirect_exception(redirect, status.HTTP_403_FORBIDDEN)
    raise redirect_exception(redirect)
