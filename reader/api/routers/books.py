# reader/api/routers/books.py
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from reader.api.deps import current_user, get_services
from reader.api.schemas import (
    BookDetailOut,
    BookOut,
    ChapterOut,
    UpdateBookIn,
    UploadOut,
    success,
)
from reader.container import Services

router = APIRouter()


@router.post("/upload")
def upload_book(
    file: UploadFile = File(...),
    title: str | None = Form(default=None),
    author: str | None = Form(default=None),
    is_public: str = Form(default="false"),
    user_id: int = Depends(current_user),
    services: Services = Depends(get_services),
):
    result = services.library.upload(
        user_id=user_id,
        filename=file.filename or "",
        data=file.file.read(),
        title=title,
        author=author,
        is_public=is_public.strip().lower() in ("true", "1"),
    )
    return success(
        UploadOut(
            book_id=result.book.id,
            title=result.book.title,
            author=result.book.author,
            chapters=[ChapterOut.from_chapter(c) for c in result.chapters],
        )
    )


@router.get("")
def list_books(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    user_id: int = Depends(current_user),
    services: Services = Depends(get_services),
):
    total, books = services.library.list_books(user_id, page, limit)
    return success({"total": total, "books": [b.model_dump(mode="json") for b in books]})


# Must be registered before /{book_id}
@router.get("/public")
def list_public_books(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    user_id: int = Depends(current_user),
    services: Services = Depends(get_services),
):
    total, books = services.library.list_public_books(page, limit)
    return success(
        {"total": total, "books": [BookOut.from_book(b).model_dump(mode="json") for b in books]}
    )


@router.get("/{book_id}")
def get_book_detail(
    book_id: int,
    user_id: int = Depends(current_user),
    services: Services = Depends(get_services),
):
    detail = services.library.get_detail(book_id, user_id)
    book = detail.book
    return success(
        BookDetailOut(
            book_id=book.id,
            title=book.title,
            author=book.author,
            is_public=book.is_public,
            created_at=book.created_at,
            length=book.char_length,
            last_read_at=detail.progress.last_read_at,
            position=detail.progress.position,
            reading_time=detail.progress.reading_time,
            chapters=[ChapterOut.from_chapter(c) for c in detail.chapters],
        )
    )


@router.put("/{book_id}")
def update_book(
    book_id: int,
    payload: UpdateBookIn,
    user_id: int = Depends(current_user),
    services: Services = Depends(get_services),
):
    book = services.library.update_book(
        book_id,
        user_id,
        title=payload.title,
        author=payload.author,
        is_public=payload.is_public,
    )
    return success(BookOut.from_book(book), message="updated")


@router.delete("/{book_id}")
def delete_book(
    book_id: int,
    user_id: int = Depends(current_user),
    services: Services = Depends(get_services),
):
    services.library.delete_book(book_id, user_id)
    return success(message="deleted")


@router.get("/{book_id}/content")
def get_book_content(
    book_id: int,
    position: int = Query(...),
    length: int | None = Query(default=None),
    user_id: int = Depends(current_user),
    services: Services = Depends(get_services),
):
    book = services.library.get_readable_book(book_id, user_id)
    return success(services.content.read(book, position, length))


@router.get("/{book_id}/jump_to_chapter")
def jump_to_chapter(
    book_id: int,
    chapter_id: int = Query(...),
    user_id: int = Depends(current_user),
    services: Services = Depends(get_services),
):
    services.library.get_readable_book(book_id, user_id)
    return success({"position": services.navigator.locate(book_id, chapter_id)})
