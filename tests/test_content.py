"""Tests for content window reads."""

import pytest

from reader.config import ReadingConfig
from reader.container import Services
from reader.errors import InvalidRange, StorageError, TextNotFound
from reader.services.content import ContentWindowService, _decode_complete

MIXED_TEXT = (
    "第一章 风起\n"
    "Spring wind through the willows. 春风吹过柳梢😀，镇上的茶馆里坐满了人。\n"
    "第二章 夜雨\n"
    "Rain all night 🌧️ on the roof; 夜里下起了雨，屋檐滴滴答答。\n"
)


class TestRead:
    def test_first_window(self, services: Services, upload_text) -> None:
        book = upload_text("Hello, world")
        window = services.content.read(book, 0, 5)
        assert window.content == "Hello"
        assert window.next_position == 5

    def test_window_inside_multibyte_text(self, services: Services, upload_text) -> None:
        book = upload_text(MIXED_TEXT)
        for position in (0, 3, 15, 16, 17, 40, 63):
            window = services.content.read(book, position, 10)
            assert window.content == MIXED_TEXT[position:position + 10]

    def test_chained_reads_reconstruct_text(self, services: Services, upload_text) -> None:
        book = upload_text(MIXED_TEXT)
        parts: list[str] = []
        position = 0
        while position < book.char_length:
            window = services.content.read(book, position, 7)
            parts.append(window.content)
            position = window.next_position
        assert "".join(parts) == MIXED_TEXT
        assert position == len(MIXED_TEXT)

    def test_reads_are_idempotent(self, services: Services, upload_text) -> None:
        book = upload_text(MIXED_TEXT)
        first = services.content.read(book, 20, 30)
        second = services.content.read(book, 20, 30)
        assert first == second

    def test_short_final_window(self, services: Services, upload_text) -> None:
        book = upload_text("abcdef")
        window = services.content.read(book, 4, 100)
        assert window.content == "ef"
        assert window.next_position == 6

    def test_end_of_book_returns_empty(self, services: Services, upload_text) -> None:
        book = upload_text("abcdef")
        window = services.content.read(book, 6, 10)
        assert window.content == ""
        assert window.next_position == 6

    def test_default_length(self, services: Services, upload_text) -> None:
        book = upload_text("x" * 5000)
        window = services.content.read(book, 0)
        assert len(window.content) == 4000

    def test_length_is_clamped_to_max(self, services: Services, upload_text) -> None:
        book = upload_text("y" * 12000)
        window = services.content.read(book, 0, 50000)
        assert len(window.content) == 10000
        assert window.next_position == 10000

    def test_does_not_touch_progress(self, services: Services, upload_text) -> None:
        book = upload_text("abcdef")
        services.content.read(book, 3, 2)
        assert services.progress.get_progress(1, book.id).position == 0


class TestInvalidRange:
    def test_negative_position(self, services: Services, upload_text) -> None:
        book = upload_text("abc")
        with pytest.raises(InvalidRange):
            services.content.read(book, -1, 2)

    def test_position_past_end(self, services: Services, upload_text) -> None:
        book = upload_text("abc")
        with pytest.raises(InvalidRange):
            services.content.read(book, 4, 2)

    def test_zero_length(self, services: Services, upload_text) -> None:
        book = upload_text("abc")
        with pytest.raises(InvalidRange):
            services.content.read(book, 0, 0)


class TestMissingText:
    def test_missing_file_raises(self, services: Services, upload_text) -> None:
        book = upload_text("abc")
        services.text_store.delete(book.file_path)
        content = ContentWindowService(services.text_store, ReadingConfig())
        with pytest.raises(TextNotFound):
            content.read(book, 0, 2)


class TestDecodeComplete:
    def test_drops_trailing_partial_character(self) -> None:
        data = "ab中".encode("utf-8")[:-1]
        assert _decode_complete(data, "x.txt") == "ab"

    def test_complete_input_unchanged(self) -> None:
        assert _decode_complete("风起😀".encode("utf-8"), "x.txt") == "风起😀"

    def test_corrupt_data_raises(self) -> None:
        with pytest.raises(StorageError):
            _decode_complete(b"ab\xffcd", "x.txt")
