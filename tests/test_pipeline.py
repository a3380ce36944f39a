from datetime import datetime
from pathlib import Path
from unittest.mock import patch

import yaml

from import_converter.config.common import MP4_EPOCH_OFFSET
from import_converter.domain.entries import TimestampSource
from import_converter.domain.exceptions import UnreadableSourceException
from import_converter.pipeline.import_pipeline import ImportPipeline
from import_converter.services.timestamp_resolver import TimestampResolver
from media_builders import set_mtime, write_jpeg, write_mp4, writes_output

RUN_CMD = "import_converter.services.batch_service.run_cmd"
VERIFY = "import_converter.pipeline.import_pipeline.Modules.verify_transcoder"
CLIP_TIME = 1_688_465_700


def populate(source: Path):
    camera = source / "DCIM"
    camera.mkdir(parents=True)
    write_jpeg(camera / "a.jpg", "2023:07:04 10:15:00")
    write_mp4(camera / "clip.mp4", MP4_EPOCH_OFFSET + CLIP_TIME)
    (source / "readme.txt").write_text("notes")
    set_mtime(source / "readme.txt", 1_600_000_000)
    (source / "ignored.raw").write_bytes(b"raw")


class FailingResolver(TimestampResolver):
    """Treats files with the given names as unreadable."""

    def __init__(self, unreadable_names):
        super().__init__(use_ffprobe=False)
        self.unreadable_names = set(unreadable_names)

    def resolve(self, path):
        if path.name in self.unreadable_names:
            raise UnreadableSourceException(f"failed to open file {path}")
        return super().resolve(path)


class TestPlanning:
    def test_plan(self, make_settings):
        settings = make_settings(dry_run=True)
        populate(settings.source_dir)

        pipeline = ImportPipeline(settings)
        entries = pipeline.discover()

        by_name = {entry.source_path.name: entry for entry in entries}
        assert sorted(by_name) == ["a.jpg", "clip.mp4", "readme.txt"]

        photo = by_name["a.jpg"]
        assert photo.creation_date_source is TimestampSource.EXIF
        assert photo.destination_path == settings.destination_dir / "2023" / "07" / "20230704_a.jpg"
        assert photo.reencode is False

        clip = by_name["clip.mp4"]
        taken = datetime.fromtimestamp(CLIP_TIME)
        assert clip.creation_date_source is TimestampSource.CONTAINER_METADATA
        assert clip.reencode is True
        assert clip.destination_path == (
            settings.destination_dir / taken.strftime("%Y/%m") / f"{taken:%Y%m%d}_clip.mkv"
        )

        note = by_name["readme.txt"]
        assert note.creation_date_source is TimestampSource.FILESYSTEM_ATTRIBUTE
        assert note.size == 5

    def test_file_matched_by_two_masks_is_planned_once(self, make_settings):
        settings = make_settings(copy_extensions=("*.jpg",), reencode_extensions=("a.*",))
        populate(settings.source_dir)

        entries = ImportPipeline(settings).discover()

        assert [(e.source_path.name, e.reencode) for e in entries] == [("a.jpg", False)]

    def test_unreadable_file_is_skipped(self, make_settings):
        settings = make_settings()
        populate(settings.source_dir)

        pipeline = ImportPipeline(settings, resolver=FailingResolver({"clip.mp4"}))
        entries = pipeline.discover()

        assert "clip.mp4" not in [e.source_path.name for e in entries]
        assert [p.name for p in pipeline.skipped_files] == ["clip.mp4"]

    def test_missing_source_directory(self, make_settings, tmp_path):
        settings = make_settings(source_dir=tmp_path / "card")
        settings.source_dir.rmdir()
        assert ImportPipeline(settings).discover() == []


class TestRun:
    def test_dry_run_touches_nothing(self, make_settings):
        settings = make_settings(dry_run=True)
        populate(settings.source_dir)

        pipeline = ImportPipeline(settings)
        with patch(RUN_CMD) as run_mock, patch(VERIFY) as verify_mock:
            assert pipeline.run() is None

        run_mock.assert_not_called()
        verify_mock.assert_not_called()
        assert len(pipeline.planned_entries) == 3
        assert pipeline.processed_entries == []
        assert not settings.destination_dir.exists()

    def test_dry_run_starts_no_process_even_with_ffprobe(self, make_settings):
        settings = make_settings(dry_run=True, use_ffprobe=True)
        populate(settings.source_dir)
        write_jpeg(settings.source_dir / "no_exif.jpg")

        with patch("subprocess.Popen") as popen_mock, patch("subprocess.run") as run_mock:
            assert ImportPipeline(settings).run() is None

        popen_mock.assert_not_called()
        run_mock.assert_not_called()

    def test_real_run_consults_ffprobe(self, make_settings):
        settings = make_settings(use_ffprobe=True)
        populate(settings.source_dir)

        with patch("ffmpeg.probe", return_value={"format": {}, "streams": []}) as probe_mock:
            ImportPipeline(settings).discover()

        probed = {Path(call.args[0]).name for call in probe_mock.call_args_list}
        assert "readme.txt" in probed

    def test_full_run(self, make_settings):
        settings = make_settings()
        populate(settings.source_dir)

        pipeline = ImportPipeline(settings)
        with patch(RUN_CMD, side_effect=writes_output(payload=b"small")), patch(VERIFY, return_value=True) as verify:
            summary = pipeline.run()

        verify.assert_called_once_with("HandBrakeCLI")
        assert summary.total_count == summary.success_count == 3
        assert (summary.copy_success_count, summary.reencode_success_count) == (2, 1)
        assert all(entry.destination_path.is_file() for entry in pipeline.processed_entries)
        copied = sum(entry.size for entry in pipeline.planned_entries if not entry.reencode)
        assert summary.size_after == copied + len(b"small")

        reports = list(settings.destination_dir.glob("import_log_*.yaml"))
        assert len(reports) == 1
        report = yaml.safe_load(reports[0].read_text(encoding="utf-8"))
        assert len(report["entries"]) == 3
        assert report["summary"]["success_count"] == 3
        assert not (settings.destination_dir / "import_error").exists()

    def test_failed_encode_is_reported(self, make_settings):
        settings = make_settings()
        populate(settings.source_dir)

        with patch(RUN_CMD, side_effect=writes_output(returncode=1)), patch(VERIFY, return_value=False):
            summary = ImportPipeline(settings).run()

        assert (summary.reencode_success_count, summary.reencode_fail_count) == (0, 1)
        assert summary.copy_success_count == 2
        assert "clip.mp4" in (settings.destination_dir / "import_error" / "error.txt").read_text(encoding="utf-8")

    def test_copy_only_run_skips_transcoder_check(self, make_settings):
        settings = make_settings(reencode_extensions=(), write_reports=False)
        populate(settings.source_dir)

        with patch(VERIFY) as verify:
            summary = ImportPipeline(settings).run()

        verify.assert_not_called()
        assert summary.total_count == 2
        assert list(settings.destination_dir.glob("import_log_*.yaml")) == []
