"""Authentication helpers for CareNote admin routes."""
from __future__ import annotations

import secrets

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader

from ..core.config import Settings, get_settings

admin_key_header = APIKeyHeader(name="X-CareNote-Key", auto_error=False)


def verify_admin_key(
    api_key: str | None = Security(admin_key_header),
    settings: Settings = Depends(get_settings),
) -> None:
    if api_key and any(secrets.compare_digest(api_key, key) for key in settings.admin_keys):
        return
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")
