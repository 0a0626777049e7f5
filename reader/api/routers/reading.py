# reader/api/routers/reading.py
from fastapi import APIRouter, Depends

from reader.api.deps import current_user, get_services
from reader.api.schemas import HeartbeatIn, success
from reader.container import Services

router = APIRouter()


@router.post("/heartbeat")
def heartbeat(
    payload: HeartbeatIn,
    user_id: int = Depends(current_user),
    services: Services = Depends(get_services),
):
    services.library.get_readable_book(payload.book_id, user_id)
    result = services.progress.heartbeat(
        user_id=user_id,
        book_id=payload.book_id,
        device_id=payload.device_id,
        reported_position=payload.position,
    )
    return success(result)


@router.get("/progress/{book_id}")
def get_progress(
    book_id: int,
    user_id: int = Depends(current_user),
    services: Services = Depends(get_services),
):
    services.library.get_readable_book(book_id, user_id)
    return success(services.progress.get_progress(user_id, book_id))
