from dataclasses import FrozenInstanceError
from datetime import datetime
from pathlib import Path

import pytest

from import_converter.domain.entries import FileEntry, MaskEntry, TimestampSource


def planned(**overrides) -> FileEntry:
    values = dict(
        source_path=Path("/card/a.jpg"),
        destination_path=Path("/archive/2023/07/20230704_a.jpg"),
        creation_date=datetime(2023, 7, 4, 10, 15),
        creation_date_source=TimestampSource.EXIF,
        size=1024,
        reencode=False,
    )
    values.update(overrides)
    return FileEntry(**values)


class TestMaskEntry:
    @pytest.mark.parametrize("value", ["jpg", ".jpg", "*.jpg", " *.jpg "])
    def test_normalises_extensions(self, value):
        assert MaskEntry.from_setting(value, reencode=False).extension == "*.jpg"

    def test_keeps_patterns(self):
        assert MaskEntry.from_setting("IMG_????.JPG", reencode=True).extension == "IMG_????.JPG"

    def test_action(self):
        assert MaskEntry("*.mp4", True).action == "reencode"
        assert MaskEntry("*.jpg", False).action == "copy"


class TestTimestampSource:
    def test_exactly_four_sources(self):
        assert [s.name for s in TimestampSource] == [
            "EXIF",
            "CONTAINER_METADATA",
            "FILESYSTEM_ATTRIBUTE",
            "LOCAL_CLOCK_FALLBACK",
        ]

    def test_labels(self):
        assert str(TimestampSource.CONTAINER_METADATA) == "MP4 Metadata"
        assert str(TimestampSource.LOCAL_CLOCK_FALLBACK) == "Local Time"


class TestFileEntry:
    def test_planned_defaults(self):
        entry = planned()
        assert entry.success is False
        assert entry.size_after_action == 0
        assert entry.action == "copy"

    def test_is_immutable(self):
        with pytest.raises(FrozenInstanceError):
            planned().destination_path = Path("/elsewhere")

    def test_success_outcome(self):
        entry = planned()
        result = entry.with_outcome(True, 1024)
        assert (result.success, result.size_after_action) == (True, 1024)
        assert result.destination_path == entry.destination_path
        assert entry.success is False

    def test_failed_outcome_has_no_size(self):
        assert planned().with_outcome(False, 999).size_after_action == 0

    def test_success_is_final(self):
        with pytest.raises(ValueError):
            planned().with_outcome(True, 10).with_outcome(False)

    def test_source_must_be_a_timestamp_source(self):
        with pytest.raises(TypeError):
            planned(creation_date_source="unknown")

    def test_failed_entry_cannot_carry_size(self):
        with pytest.raises(ValueError):
            planned(size_after_action=5)

    def test_as_dict(self):
        data = planned(reencode=True).with_outcome(True, 300).as_dict()
        assert data == {
            "source_path": str(Path("/card/a.jpg")),
            "destination_path": str(Path("/archive/2023/07/20230704_a.jpg")),
            "creation_date": "2023-07-04 10:15:00",
            "creation_date_source": "EXIF",
            "action": "reencode",
            "success": True,
            "size": 1024,
            "size_after_action": 300,
        }
