"""Request dependencies shared by the routers."""

from fastapi import Header, HTTPException, Request

from reader.container import Services


def get_services(request: Request) -> Services:
    """Use the services wired in ``create_app``."""
    return request.app.state.services


def current_user(x_user_id: str | None = Header(default=None)) -> int:
    """Authenticated user id, set by the auth layer in front of this API."""
    if not x_user_id or not x_user_id.isdigit():
        raise HTTPException(status_code=401, detail="Unauthorized")
    return int(x_user_id)
