from datetime import datetime
from pathlib import Path

import pytest

from photo_renamer.config import OrganizerSettings
from photo_renamer.exceptions import FileOperationError, MetadataReadError, MetadataWriteError
from photo_renamer.models import DateSource, MediaKind, ResolvedDate, Status
from photo_renamer.organization.renamer import DateResolutionEngine
from photo_renamer.scanning.filesystem import LocalFileSystem


def _engine(metadata, **settings):
    return DateResolutionEngine(OrganizerSettings(**settings), metadata, LocalFileSystem())


def _mtime(path: Path) -> datetime:
    return datetime.fromtimestamp(path.stat().st_mtime)


# --- Idempotence ---

@pytest.mark.parametrize("name", ["2023-05-02 14.00.00.jpg", "2023-05-02 14.00.00_1.mp4"])
def test_canonical_name_is_left_alone(tmp_path, fake_metadata, name):
    p = tmp_path / name
    p.write_bytes(b"x")
    kind = MediaKind.IMAGE if name.endswith(".jpg") else MediaKind.VIDEO

    outcome = _engine(fake_metadata).process(p, kind)

    assert outcome.status is Status.ALREADY_CANONICAL
    assert p.exists()
    assert fake_metadata.reads == []
    assert fake_metadata.writes == []


def test_second_run_is_noop(tmp_path, fake_metadata):
    p = tmp_path / "IMG_20230502_143015.jpg"
    p.write_bytes(b"x")
    metadata = fake_metadata
    engine = _engine(metadata)

    first = engine.process(p, MediaKind.IMAGE)
    second = engine.process(first.new_path, MediaKind.IMAGE)

    assert first.status is Status.RENAMED
    assert second.status is Status.ALREADY_CANONICAL
    assert len(metadata.writes) == 1


# --- Images ---

def test_image_uses_metadata_first(tmp_path, metadata_factory):
    p = tmp_path / "IMG_20230502_143015.jpg"
    p.write_bytes(b"x")
    metadata = metadata_factory({p.name: ResolvedDate(2019, 1, 2, 3, 4, 5)})

    outcome = _engine(metadata).process(p, MediaKind.IMAGE)

    assert outcome.status is Status.RENAMED
    assert outcome.source is DateSource.METADATA
    assert outcome.new_path == tmp_path / "2019-01-02 03.04.05.jpg"
    assert outcome.new_path.exists()
    # No write-back when the date already came from EXIF
    assert metadata.writes == []


def test_image_falls_back_to_filename_and_writes_metadata(tmp_path, fake_metadata):
    p = tmp_path / "IMG_20230502_143015.jpg"
    p.write_bytes(b"x")

    outcome = _engine(fake_metadata).process(p, MediaKind.IMAGE)

    assert outcome.status is Status.RENAMED
    assert outcome.source is DateSource.FILENAME
    assert outcome.new_path == tmp_path / "2023-05-02 14.30.15.jpg"
    assert fake_metadata.writes == [("IMG_20230502_143015.jpg", ResolvedDate(2023, 5, 2, 14, 30, 15))]
    assert _mtime(outcome.new_path) == datetime(2023, 5, 2, 14, 30, 15)


def test_image_filename_without_time_gets_defaults(tmp_path, fake_metadata):
    p = tmp_path / "photo_2023-05-02.heic"
    p.write_bytes(b"x")

    outcome = _engine(fake_metadata).process(p, MediaKind.IMAGE)

    assert outcome.new_path == tmp_path / "2023-05-02 14.00.00.heic"


def test_image_without_any_date_is_untouched(tmp_path, fake_metadata):
    p = tmp_path / "IMG_0001.jpg"
    p.write_bytes(b"x")

    outcome = _engine(fake_metadata).process(p, MediaKind.IMAGE)

    assert outcome.status is Status.NO_DATE
    assert p.exists()
    assert fake_metadata.writes == []


def test_image_with_invalid_date_is_untouched(tmp_path, fake_metadata):
    p = tmp_path / "20231345_000000.jpg"
    p.write_bytes(b"x")

    outcome = _engine(fake_metadata).process(p, MediaKind.IMAGE)

    assert outcome.status is Status.INVALID_DATE
    assert p.exists()
    assert list(tmp_path.iterdir()) == [p]
    assert fake_metadata.writes == []


def test_unreadable_metadata_falls_back_to_filename(tmp_path, fake_metadata):
    def broken_read(path):
        raise MetadataReadError("corrupt")

    fake_metadata.read_date_taken = broken_read

    p = tmp_path / "IMG_20230502_143015.jpg"
    p.write_bytes(b"x")

    outcome = _engine(fake_metadata).process(p, MediaKind.IMAGE)

    assert outcome.status is Status.RENAMED
    assert outcome.source is DateSource.FILENAME


def test_metadata_write_failure_still_renames(tmp_path, metadata_factory):
    metadata = metadata_factory(write_error=MetadataWriteError("read-only container"))
    p = tmp_path / "IMG_20230502_143015.heic"
    p.write_bytes(b"x")

    outcome = _engine(metadata).process(p, MediaKind.IMAGE)

    assert outcome.status is Status.METADATA_WRITE_FAILED
    # Partial success: renamed, only the EXIF write is missing
    assert outcome.ok
    assert outcome.message == "read-only container"
    assert outcome.new_path == tmp_path / "2023-05-02 14.30.15.heic"
    assert outcome.new_path.exists()


def test_real_jpeg_gets_exif_from_filename(tmp_path, make_jpeg):
    from photo_renamer.metadata.exif import ExifDateStore

    p = make_jpeg("IMG_20230502_143015.jpg")
    engine = DateResolutionEngine(OrganizerSettings(), ExifDateStore(), LocalFileSystem())

    outcome = engine.process(p, MediaKind.IMAGE)

    assert outcome.status is Status.RENAMED
    assert ExifDateStore().read_date_taken(outcome.new_path) == ResolvedDate(2023, 5, 2, 14, 30, 15)


# --- Videos ---

def test_video_prefers_filename(tmp_path, fake_metadata, set_mtime):
    p = tmp_path / "VID_20210704_091530.mp4"
    p.write_bytes(b"x")
    set_mtime(p, datetime(2022, 1, 1, 0, 0, 0))

    outcome = _engine(fake_metadata).process(p, MediaKind.VIDEO)

    assert outcome.source is DateSource.FILENAME
    assert outcome.new_path == tmp_path / "2021-07-04 09.15.30.mp4"
    assert _mtime(outcome.new_path) == datetime(2021, 7, 4, 9, 15, 30)
    assert fake_metadata.reads == []


def test_video_falls_back_to_mtime(tmp_path, fake_metadata, set_mtime):
    p = tmp_path / "clip.mov"
    p.write_bytes(b"x")
    set_mtime(p, datetime(2022, 3, 4, 5, 6, 7))

    outcome = _engine(fake_metadata).process(p, MediaKind.VIDEO)

    assert outcome.status is Status.RENAMED
    assert outcome.source is DateSource.MTIME
    assert outcome.date == ResolvedDate(2022, 3, 4, 5, 6, 7)
    assert outcome.new_path == tmp_path / "2022-03-04 05.06.07.mov"


def test_video_with_invalid_filename_date_uses_mtime(tmp_path, fake_metadata, set_mtime):
    p = tmp_path / "20231345_000000.mp4"
    p.write_bytes(b"x")
    set_mtime(p, datetime(2020, 2, 2, 2, 2, 2))

    outcome = _engine(fake_metadata).process(p, MediaKind.VIDEO)

    assert outcome.source is DateSource.MTIME
    assert outcome.new_path == tmp_path / "2020-02-02 02.02.02.mp4"


def test_retime_can_be_disabled(tmp_path, fake_metadata, set_mtime):
    p = tmp_path / "VID_20210704_091530.mp4"
    p.write_bytes(b"x")
    set_mtime(p, datetime(2022, 1, 1, 0, 0, 0))

    outcome = _engine(fake_metadata, retime_from_filename=False).process(p, MediaKind.VIDEO)

    assert _mtime(outcome.new_path) == datetime(2022, 1, 1, 0, 0, 0)


# --- Collisions, failures, dry run ---

def test_collisions_get_counter_suffix(tmp_path, fake_metadata):
    a = tmp_path / "a_20230502.jpg"
    b = tmp_path / "b_20230502.jpg"
    a.write_bytes(b"a")
    b.write_bytes(b"b")
    engine = _engine(fake_metadata)

    first = engine.process(a, MediaKind.IMAGE)
    second = engine.process(b, MediaKind.IMAGE)

    assert first.new_path.name == "2023-05-02 14.00.00.jpg"
    assert second.new_path.name == "2023-05-02 14.00.00_1.jpg"
    assert first.new_path.read_bytes() == b"a"
    assert second.new_path.read_bytes() == b"b"


def test_rename_failure_is_reported(tmp_path, fake_metadata, monkeypatch):
    p = tmp_path / "IMG_20230502_143015.jpg"
    p.write_bytes(b"x")

    def fail(self, src, dest):
        raise FileOperationError("disk says no")

    monkeypatch.setattr(LocalFileSystem, "rename", fail)
    outcome = _engine(fake_metadata).process(p, MediaKind.IMAGE)

    assert outcome.status is Status.RENAME_FAILED
    assert p.exists()
    # Metadata written before the rename stays written
    assert len(fake_metadata.writes) == 1


def test_dry_run_touches_nothing(tmp_path, fake_metadata, set_mtime):
    p = tmp_path / "IMG_20230502_143015.jpg"
    p.write_bytes(b"x")
    set_mtime(p, datetime(2022, 1, 1, 0, 0, 0))

    outcome = _engine(fake_metadata, dry_run=True).process(p, MediaKind.IMAGE)

    assert outcome.status is Status.RENAMED
    assert outcome.new_path == tmp_path / "2023-05-02 14.30.15.jpg"
    assert p.exists()
    assert not outcome.new_path.exists()
    assert fake_metadata.writes == []
    assert _mtime(p) == datetime(2022, 1, 1, 0, 0, 0)


def test_dry_run_collisions_get_counter_suffix(tmp_path, fake_metadata):
    a = tmp_path / "a_20230502.jpg"
    b = tmp_path / "b_20230502.jpg"
    a.write_bytes(b"a")
    b.write_bytes(b"b")
    engine = _engine(fake_metadata, dry_run=True)

    first = engine.process(a, MediaKind.IMAGE)
    second = engine.process(b, MediaKind.IMAGE)

    assert first.new_path.name == "2023-05-02 14.00.00.jpg"
    assert second.new_path.name == "2023-05-02 14.00.00_1.jpg"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["a_20230502.jpg", "b_20230502.jpg"]


def test_begin_run_forgets_planned_names(tmp_path, fake_metadata):
    p = tmp_path / "a_20230502.jpg"
    p.write_bytes(b"a")
    engine = _engine(fake_metadata, dry_run=True)

    engine.process(p, MediaKind.IMAGE)
    engine.begin_run()
    again = engine.process(p, MediaKind.IMAGE)

    assert again.new_path.name == "2023-05-02 14.00.00.jpg"


def test_unclassified_is_skipped(tmp_path, fake_metadata):
    p = tmp_path / "notes_20230502.txt"
    p.write_text("x")

    outcome = _engine(fake_metadata).process(p, MediaKind.UNCLASSIFIED)

    assert outcome.status is Status.UNCLASSIFIED
    assert p.exists()
