import pytest

from aviasafe.services.attachment_policy import (
    ALLOWED_FILE_TYPES,
    MAX_FILE_SIZE,
    file_extension,
    file_icon_type,
    format_size,
    is_allowed_size,
    is_allowed_type,
    storage_file_name,
)


@pytest.mark.parametrize(
    "size,expected",
    [
        (0, "0 Bytes"),
        (500, "500 Bytes"),
        (1024, "1 KB"),
        (1536, "1.5 KB"),
        (10485760, "10 MB"),
        (1024 ** 3, "1 GB"),
    ],
)
def test_format_size(size, expected):
    assert format_size(size) == expected


def test_size_limit_is_inclusive():
    assert MAX_FILE_SIZE == 10 * 1024 * 1024
    assert is_allowed_size(MAX_FILE_SIZE)
    assert not is_allowed_size(MAX_FILE_SIZE + 1)


def test_allow_list():
    assert len(ALLOWED_FILE_TYPES) == 17
    assert is_allowed_type("application/pdf")
    assert is_allowed_type("image/png")
    assert not is_allowed_type("application/x-msdownload")
    assert not is_allowed_type("")
    assert not is_allowed_type(None)


def test_icon_types():
    assert file_icon_type("image/jpeg") == "image"
    assert file_icon_type("application/pdf") == "pdf"
    assert file_icon_type("application/vnd.ms-excel") == "spreadsheet"
    assert (
        file_icon_type(
            "application/vnd.openxmlformats-officedocument.presentationml.presentation"
        )
        == "presentation"
    )
    assert file_icon_type("application/msword") == "document"
    assert file_icon_type("application/zip") == "archive"
    assert file_icon_type("text/csv") == "text"
    assert file_icon_type("application/octet-stream") == "file"


def test_extension():
    assert file_extension("Report.PDF") == "pdf"
    assert file_extension("README") == ""


def test_storage_file_name_is_sanitised():
    assert storage_file_name("engine photo.jpg", 1700000000000) == "1700000000000-engine_photo.jpg"
    assert storage_file_name("../../etc/passwd", 1) == "1-passwd"
    assert storage_file_name("notes", 2) == "2-notes"
