from __future__ import annotations

from browshot.replies import IMAGE_FORMATS, decode_reply, missing_argument, sniff_image


def test_empty_body_is_invalid_response() -> None:
    assert decode_reply("") == {"error": 1, "message": "Invalid server response"}


def test_malformed_json_is_invalid_response(caplog) -> None:
    assert decode_reply("<html>502 Bad Gateway</html>") == {"error": 1, "message": "Invalid server response"}
    assert "Invalid JSON" in caplog.text


def test_valid_json_is_parsed() -> None:
    assert decode_reply('{"id": 12, "status": "finished"}') == {"id": 12, "status": "finished"}


def test_missing_argument_shape() -> None:
    assert missing_argument("Missing URL") == {"status": "error", "error": "Missing URL"}


def test_sniff_known_formats(png: bytes, jpeg: bytes, gif: bytes) -> None:
    assert sniff_image(png) == "PNG"
    assert sniff_image(jpeg) == "JPEG"
    assert sniff_image(gif) == "GIF"


def test_sniff_unknown_bytes() -> None:
    assert sniff_image(b"") is None
    assert sniff_image(b"<html>error</html>") is None


def test_only_png_and_jpeg_are_screenshots(png: bytes, jpeg: bytes, gif: bytes) -> None:
    assert sniff_image(png) in IMAGE_FORMATS
    assert sniff_image(jpeg) in IMAGE_FORMATS
    assert sniff_image(gif) not in IMAGE_FORMATS
    assert sniff_image(b'{"error": 1}') not in IMAGE_FORMATS


def test_sniff_oversized_png(tall_png: bytes) -> None:
    assert sniff_image(tall_png) == "PNG"
