"""
Tests for conflict-safe reorganisation.
"""

from datetime import datetime
from pathlib import Path

import pytest

from babysort.core.errors import (
    RelocationError,
    TargetDirectoryError,
    TargetExistsError,
    VerificationError,
)
from babysort.organization.reorganizer import (
    STAGING_PREFIX,
    OrganizationOperation,
    Reorganizer,
)

BIRTH_DAY = datetime(2024, 1, 1, 9)
ONE_WEEK = datetime(2024, 1, 11)


def _staging_files(directory: Path):
    return list(directory.rglob(f"{STAGING_PREFIX}*"))


class TestReorganizer:
    """Tests for Reorganizer."""

    def test_move_into_subfolder(self, tmp_path: Path, config, write_photo, make_photo):
        """Test photos are moved to their named location."""
        source = tmp_path / "source"
        target = tmp_path / "target"
        photo = make_photo(write_photo(source / "IMG_0001.jpg"), ONE_WEEK)

        report = Reorganizer(config, target_root=target).organize_group(
            "1 Weeks", [photo]
        )

        expected = target / "1 Weeks" / "Ada 1 Weeks 001.jpg"
        assert expected.read_text() == "photo IMG_0001.jpg"
        assert not photo.path.exists()
        assert report.moved == 1
        assert report.photos[0].path == expected
        assert report.photos[0].target_path == expected

    def test_in_place_without_subfolders(
        self, tmp_path: Path, config, write_photo, make_photo
    ):
        """Test organising in place renames photos next to themselves."""
        photo = make_photo(write_photo(tmp_path / "IMG_0001.jpg"), ONE_WEEK)

        Reorganizer(config, subfolders=False).organize_group("1 Weeks", [photo])

        assert (tmp_path / "Ada 1 Weeks 001.jpg").exists()
        assert not photo.path.exists()

    def test_idempotent(self, tmp_path: Path, config, write_photo, make_photo):
        """Test that reorganising sorted photos does nothing."""
        source = tmp_path / "source"
        target = tmp_path / "target"
        photos = [
            make_photo(write_photo(source / "a.jpg"), ONE_WEEK, sequence_id=1),
            make_photo(write_photo(source / "b.jpg"), ONE_WEEK, sequence_id=2),
        ]
        reorganizer = Reorganizer(config, target_root=target)
        first = reorganizer.organize_group("1 Weeks", photos)

        second = Reorganizer(config, target_root=target).organize_group(
            "1 Weeks", first.photos
        )

        assert second.skipped
        assert second.no_ops == 2
        assert second.moved == 0
        assert sorted(p.name for p in (target / "1 Weeks").iterdir()) == [
            "Ada 1 Weeks 001.jpg",
            "Ada 1 Weeks 002.jpg",
        ]

    def test_swap_resolved_without_data_loss(
        self, tmp_path: Path, config, write_photo, make_photo
    ):
        """Test that two photos swapping names end up with the right content."""
        first = write_photo(tmp_path / "Ada 0 Days 001.jpg", content="first")
        second = write_photo(tmp_path / "Ada 0 Days 002.jpg", content="second")
        photos = [
            make_photo(second, BIRTH_DAY, sequence_id=1),
            make_photo(first, BIRTH_DAY, sequence_id=2),
        ]

        report = Reorganizer(config, subfolders=False).organize_group("0 Days", photos)

        assert (tmp_path / "Ada 0 Days 001.jpg").read_text() == "second"
        assert (tmp_path / "Ada 0 Days 002.jpg").read_text() == "first"
        assert report.conflicts == 2
        assert report.staged == 2
        assert report.moved == 2
        assert _staging_files(tmp_path) == []

    def test_chain_with_no_op(self, tmp_path: Path, config, write_photo, make_photo):
        """Test a group mixing photos in place with photos shifting names."""
        keep = write_photo(tmp_path / "Ada 0 Days 001.jpg", content="keep")
        shift = write_photo(tmp_path / "Ada 0 Days 003.jpg", content="shift")
        new = write_photo(tmp_path / "IMG_0001.jpg", content="new")
        photos = [
            make_photo(keep, BIRTH_DAY, sequence_id=1),
            make_photo(new, BIRTH_DAY, sequence_id=2),
            make_photo(shift, BIRTH_DAY, sequence_id=3),
        ]

        report = Reorganizer(config, subfolders=False).organize_group("0 Days", photos)

        assert report.no_ops == 2
        assert report.moved == 1
        assert (tmp_path / "Ada 0 Days 001.jpg").read_text() == "keep"
        assert (tmp_path / "Ada 0 Days 002.jpg").read_text() == "new"
        assert (tmp_path / "Ada 0 Days 003.jpg").read_text() == "shift"

    def test_three_way_cycle(self, tmp_path: Path, config, write_photo, make_photo):
        """Test that three photos rotating names end up with the right content."""
        first = write_photo(tmp_path / "Ada 0 Days 001.jpg", content="first")
        second = write_photo(tmp_path / "Ada 0 Days 002.jpg", content="second")
        third = write_photo(tmp_path / "Ada 0 Days 003.jpg", content="third")
        photos = [
            make_photo(third, BIRTH_DAY, sequence_id=1),
            make_photo(first, BIRTH_DAY, sequence_id=2),
            make_photo(second, BIRTH_DAY, sequence_id=3),
        ]

        report = Reorganizer(config, subfolders=False).organize_group("0 Days", photos)

        assert (tmp_path / "Ada 0 Days 001.jpg").read_text() == "third"
        assert (tmp_path / "Ada 0 Days 002.jpg").read_text() == "first"
        assert (tmp_path / "Ada 0 Days 003.jpg").read_text() == "second"
        assert report.staged == 3
        assert report.moved == 3
        assert _staging_files(tmp_path) == []

    def test_refuses_to_overwrite(self, tmp_path: Path, config, write_photo, make_photo):
        """Test that a file outside the group is never overwritten."""
        target = tmp_path / "target"
        existing = write_photo(target / "1 Weeks" / "Ada 1 Weeks 001.jpg", "existing")
        photo = make_photo(write_photo(tmp_path / "source" / "a.jpg"), ONE_WEEK)

        with pytest.raises(TargetExistsError):
            Reorganizer(config, target_root=target).organize_group("1 Weeks", [photo])

        assert existing.read_text() == "existing"
        assert photo.path.exists()

    def test_copy_preserves_originals(
        self, tmp_path: Path, config, write_photo, make_photo
    ):
        """Test that copying leaves the source photo in place."""
        target = tmp_path / "target"
        photo = make_photo(write_photo(tmp_path / "source" / "a.jpg"), ONE_WEEK)

        report = Reorganizer(
            config, target_root=target, operation=OrganizationOperation.COPY
        ).organize_group("1 Weeks", [photo])

        assert photo.path.exists()
        assert (target / "1 Weeks" / "Ada 1 Weeks 001.jpg").exists()
        assert report.copied == 1
        assert report.moved == 0

    def test_copy_swap_refused(self, tmp_path: Path, config, write_photo, make_photo):
        """Test that preserved originals are not overwritten by copies."""
        first = write_photo(tmp_path / "Ada 0 Days 001.jpg", content="first")
        second = write_photo(tmp_path / "Ada 0 Days 002.jpg", content="second")
        photos = [
            make_photo(second, BIRTH_DAY, sequence_id=1),
            make_photo(first, BIRTH_DAY, sequence_id=2),
        ]

        with pytest.raises(TargetExistsError):
            Reorganizer(
                config, subfolders=False, operation=OrganizationOperation.COPY
            ).organize_group("0 Days", photos)

        assert first.read_text() == "first"
        assert second.read_text() == "second"

    def test_dry_run(self, tmp_path: Path, config, write_photo, make_photo):
        """Test that a dry run changes nothing."""
        target = tmp_path / "target"
        photo = make_photo(write_photo(tmp_path / "source" / "a.jpg"), ONE_WEEK)

        report = Reorganizer(config, target_root=target, dry_run=True).organize_group(
            "1 Weeks", [photo]
        )

        assert report.moved == 1
        assert photo.path.exists()
        assert not target.exists()

    def test_dry_run_swap(self, tmp_path: Path, config, write_photo, make_photo):
        """Test that a dry run simulates staging without touching files."""
        first = write_photo(tmp_path / "Ada 0 Days 001.jpg", content="first")
        second = write_photo(tmp_path / "Ada 0 Days 002.jpg", content="second")
        photos = [
            make_photo(second, BIRTH_DAY, sequence_id=1),
            make_photo(first, BIRTH_DAY, sequence_id=2),
        ]

        report = Reorganizer(config, subfolders=False, dry_run=True).organize_group(
            "0 Days", photos
        )

        assert report.staged == 2
        assert first.read_text() == "first"
        assert second.read_text() == "second"
        assert _staging_files(tmp_path) == []

    def test_dry_run_frees_moved_away_path(
        self, tmp_path: Path, config, write_photo, make_photo
    ):
        """Test a simulated file moved on leaves its path free again."""
        a = write_photo(tmp_path / "a.jpg")
        d = write_photo(tmp_path / "d.jpg")
        b = tmp_path / "b.jpg"
        reorganizer = Reorganizer(config, subfolders=False, dry_run=True)

        reorganizer.relocate(make_photo(a, BIRTH_DAY, target_path=b))
        reorganizer.relocate(make_photo(b, BIRTH_DAY, target_path=tmp_path / "c.jpg"))
        reorganizer.relocate(make_photo(d, BIRTH_DAY, target_path=b))

        assert a.exists()
        assert not b.exists()

    def test_dry_run_detects_existing_target(
        self, tmp_path: Path, config, write_photo, make_photo
    ):
        """Test that a dry run reports the same refusal as a real run."""
        target = tmp_path / "target"
        write_photo(target / "1 Weeks" / "Ada 1 Weeks 001.jpg", "existing")
        photo = make_photo(write_photo(tmp_path / "source" / "a.jpg"), ONE_WEEK)

        with pytest.raises(TargetExistsError):
            Reorganizer(config, target_root=target, dry_run=True).organize_group(
                "1 Weeks", [photo]
            )

    def test_duplicate_targets(self, tmp_path: Path, config, write_photo, make_photo):
        """Test photos sharing a target are staged and the second is refused."""
        a = make_photo(write_photo(tmp_path / "source" / "a.jpg"), ONE_WEEK)
        b = make_photo(write_photo(tmp_path / "source" / "b.jpg"), ONE_WEEK)

        with pytest.raises(TargetExistsError):
            Reorganizer(config, target_root=tmp_path / "target").organize_group(
                "1 Weeks", [a, b]
            )

        # Nothing is lost, the refused photo waits in its staging file
        remaining = list((tmp_path / "target").rglob("*.jpg"))
        assert len(remaining) == 2

    def test_target_directory_failure(
        self, tmp_path: Path, config, write_photo, make_photo
    ):
        """Test that an uncreatable target directory is fatal."""
        blocker = write_photo(tmp_path / "blocker", content="not a directory")
        photo = make_photo(write_photo(tmp_path / "source" / "a.jpg"), ONE_WEEK)

        with pytest.raises(TargetDirectoryError):
            Reorganizer(config, target_root=blocker).organize_group("1 Weeks", [photo])

    def test_missing_source(self, tmp_path: Path, config, make_photo):
        """Test that a failed move is fatal."""
        photo = make_photo(tmp_path / "source" / "gone.jpg", ONE_WEEK)

        with pytest.raises(RelocationError):
            Reorganizer(config, target_root=tmp_path / "target").organize_group(
                "1 Weeks", [photo]
            )

    def test_verification(
        self, tmp_path: Path, config, write_photo, make_photo, monkeypatch
    ):
        """Test that a photo missing after the move is reported."""
        photo = make_photo(write_photo(tmp_path / "source" / "a.jpg"), ONE_WEEK)
        reorganizer = Reorganizer(config, target_root=tmp_path / "target")
        monkeypatch.setattr(reorganizer, "_transfer", lambda source, target, move: None)

        with pytest.raises(VerificationError) as exc_info:
            reorganizer.organize_group("1 Weeks", [photo])

        assert exc_info.value.group == "1 Weeks"

    def test_reorganize_all_groups(
        self, tmp_path: Path, config, write_photo, make_photo
    ):
        """Test every group gets a report."""
        target = tmp_path / "target"
        groups = {
            "0 Days": [make_photo(write_photo(tmp_path / "a.jpg"), BIRTH_DAY)],
            "1 Weeks": [make_photo(write_photo(tmp_path / "b.jpg"), ONE_WEEK)],
        }

        reports = Reorganizer(config, target_root=target).reorganize(groups)

        assert [r.label for r in reports] == ["0 Days", "1 Weeks"]
        assert (target / "0 Days" / "Ada 0 Days 001.jpg").exists()
        assert (target / "1 Weeks" / "Ada 1 Weeks 001.jpg").exists()
