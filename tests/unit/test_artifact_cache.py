"""Unit tests for the generator executable cache and start-up sweep."""

from __future__ import annotations

import shutil
from pathlib import Path

import pytest
from _pytest.monkeypatch import MonkeyPatch

from mapforge.cache import ArtifactCache
from tests.unit.helpers import seed_cached_jar


@pytest.mark.unit
def test_cache_creates_missing_root(tmp_path: Path) -> None:
    """Constructing the cache should create its root directory."""
    root = tmp_path / "data" / "map_generator"

    cache = ArtifactCache(root)

    assert root.is_dir()
    assert cache.root == root


@pytest.mark.unit
def test_cache_survives_root_creation_failure(tmp_path: Path) -> None:
    """A root that cannot be created should leave a usable, always-missing cache."""
    # Arrange - a regular file where the root's parent directory should be
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")

    # Act
    cache = ArtifactCache(blocker / "map_generator")

    # Assert
    assert not cache.exists("0.1.1")


@pytest.mark.unit
def test_exists_rechecks_disk_each_call(tmp_path: Path) -> None:
    """Presence should be re-read on each call, not memoized."""
    cache = ArtifactCache(tmp_path)

    assert cache.exists("0.1.1") is False
    assert cache.exists("0.1.1") is False

    seed_cached_jar(tmp_path, "0.1.1")

    assert cache.exists("0.1.1") is True
    assert cache.exists("0.1.1") is True


@pytest.mark.unit
def test_lookup_reports_path_and_presence(tmp_path: Path) -> None:
    """Lookup should build an entry for the version's jar path."""
    cache = ArtifactCache(tmp_path)
    jar = seed_cached_jar(tmp_path, "0.2.0")

    present = cache.lookup("0.2.0")
    missing = cache.lookup("0.3.0")

    assert present.local_path == jar
    assert present.present is True
    assert missing.local_path == tmp_path / "MapGenerator_0.3.0.jar"
    assert missing.present is False


@pytest.mark.unit
def test_sweep_deletes_only_generated_directories(tmp_path: Path) -> None:
    """Only child directories named like generated maps should be removed."""
    # Arrange - one generated dir, one unrelated dir, one generated-named file
    maps_dir = tmp_path / "maps"
    generated = maps_dir / "neroxis_map_generator_0.1.1_42"
    (generated / "nested").mkdir(parents=True)
    (generated / "nested" / "map.scmap").write_bytes(b"x")
    unrelated = maps_dir / "random_folder"
    unrelated.mkdir()
    stray_file = maps_dir / "neroxis_map_generator_0.1.1_7"
    stray_file.write_text("file, not a directory", encoding="utf-8")
    cache = ArtifactCache(tmp_path / "cache")

    # Act
    report = cache.sweep_stale_outputs(maps_dir)

    # Assert
    assert not generated.exists()
    assert unrelated.is_dir()
    assert stray_file.is_file()
    assert report.deleted == (generated,)
    assert report.failed == ()


@pytest.mark.unit
def test_sweep_missing_directory_is_noop(tmp_path: Path) -> None:
    """Sweeping a directory that does not exist should report nothing."""
    report = ArtifactCache(tmp_path / "cache").sweep_stale_outputs(
        tmp_path / "absent"
    )

    assert report.deleted == ()
    assert report.failed == ()


@pytest.mark.unit
def test_sweep_continues_after_failed_delete(
    monkeypatch: MonkeyPatch, tmp_path: Path
) -> None:
    """One failed delete should be reported without aborting the sweep."""
    # Arrange - two generated dirs; deleting the first one fails
    maps_dir = tmp_path / "maps"
    stuck = maps_dir / "neroxis_map_generator_0.1.1_1"
    removable = maps_dir / "neroxis_map_generator_0.1.1_2"
    stuck.mkdir(parents=True)
    removable.mkdir()
    real_rmtree = shutil.rmtree

    def _flaky_rmtree(path: Path, *args: object, **kwargs: object) -> None:
        if Path(path) == stuck:
            raise PermissionError("locked by another process")
        real_rmtree(path)

    monkeypatch.setattr("mapforge.cache.shutil.rmtree", _flaky_rmtree)

    # Act
    report = ArtifactCache(tmp_path / "cache").sweep_stale_outputs(maps_dir)

    # Assert
    assert report.failed == (stuck,)
    assert report.deleted == (removable,)
    assert stuck.exists()
    assert not removable.exists()


@pytest.mark.unit
def test_sweep_survives_unlistable_directory(
    monkeypatch: MonkeyPatch, tmp_path: Path
) -> None:
    """A directory that cannot be listed should yield an empty report."""
    # Arrange
    maps_dir = tmp_path / "maps"
    (maps_dir / "neroxis_map_generator_0.1.1_42").mkdir(parents=True)
    real_iterdir = Path.iterdir

    def _denied_iterdir(self: Path) -> object:
        if self == maps_dir:
            raise PermissionError("denied")
        return real_iterdir(self)

    monkeypatch.setattr(Path, "iterdir", _denied_iterdir)

    # Act
    report = ArtifactCache(tmp_path / "cache").sweep_stale_outputs(maps_dir)

    # Assert
    assert report.deleted == ()
    assert report.failed == ()
    assert (maps_dir / "neroxis_map_generator_0.1.1_42").is_dir()


@pytest.mark.unit
def test_sweep_deletes_generated_name_with_out_of_range_seed(tmp_path: Path) -> None:
    """Directory names matching the map grammar are swept whatever the seed."""
    maps_dir = tmp_path / "maps"
    oversized = maps_dir / "neroxis_map_generator_0.1.1_99999999999999999999"
    oversized.mkdir(parents=True)

    report = ArtifactCache(tmp_path / "cache").sweep_stale_outputs(maps_dir)

    assert not oversized.exists()
    assert report.deleted == (oversized,)
