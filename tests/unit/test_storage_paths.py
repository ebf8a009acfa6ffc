"""
Tests for the object key scheme.

System role: Verification of deterministic storage paths
"""

import pytest

from incident_docs.boundary.aws.storage_paths import (
    document_object_key,
    permanent_object_key,
    resolve_extension,
    sanitize_segment,
    staging_object_key,
)


class TestSanitizeSegment:
    def test_replaces_unsafe_characters(self) -> None:
        assert sanitize_segment("driving license/front.jpg") == "driving_license_front_jpg"

    def test_keeps_safe_characters(self) -> None:
        assert sanitize_segment("proof-of_address2") == "proof-of_address2"


class TestResolveExtension:
    @pytest.mark.parametrize(
        "file_name, content_type, expected",
        [
            ("licence.PNG", "image/jpeg", "png"),
            (None, "image/jpeg", "jpg"),
            ("upload", "application/pdf", "pdf"),
            ("upload", "image/heic", "heic"),
            (None, None, "jpg"),
            ("weird.tar.gz?x", None, "jpg"),
        ],
    )
    def test_prefers_file_name_then_content_type(
        self, file_name: str | None, content_type: str | None, expected: str
    ) -> None:
        assert resolve_extension(file_name, content_type) == expected


class TestObjectKeys:
    def test_document_key_layout(self) -> None:
        key = document_object_key("user-42", "driving_license_picture", "jpg", timestamp_ms=1700000000000)
        assert key == "user-42/driving_license_picture/1700000000000_driving_license_picture.jpg"

    def test_document_key_sanitizes_kind(self) -> None:
        key = document_object_key("u1", "map screenshot", "png", timestamp_ms=1)
        assert key == "u1/map_screenshot/1_map_screenshot.png"

    def test_staging_key_layout(self) -> None:
        key = staging_object_key("sess-1", "incident_photo", "jpg", timestamp_ms=5)
        assert key == "temp/sess-1/incident_photo_5.jpg"

    def test_permanent_key_keeps_staged_file_name(self) -> None:
        key = permanent_object_key("u1", "incident-9", "incident_report", "temp/sess-1/incident_photo_5.jpg")
        assert key == "permanent/u1/incident-9/incident_report/incident_photo_5.jpg"
