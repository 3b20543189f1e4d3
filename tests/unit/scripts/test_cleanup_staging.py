import importlib.util
import os
import sys
import time
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[3]
MODULE_PATH = PROJECT_ROOT / "scripts" / "cleanup_staging.py"
SPEC = importlib.util.spec_from_file_location("cleanup_staging_module", MODULE_PATH)
cleanup_staging = importlib.util.module_from_spec(SPEC)
assert SPEC and SPEC.loader
sys.modules["cleanup_staging_module"] = cleanup_staging
SPEC.loader.exec_module(cleanup_staging)


def _make_dirs(root: Path) -> tuple[Path, Path]:
    stale = root / "rec1-1000"
    fresh = root / "rec2-2000"
    stale.mkdir(parents=True)
    fresh.mkdir(parents=True)
    (stale / "content.mp3").write_bytes(b"leftover")
    old = time.time() - 3 * 24 * 3600
    os.utime(stale, (old, old))
    return stale, fresh


def test_perform_cleanup_dry_run(tmp_path):
    stale, _ = _make_dirs(tmp_path)

    summary = cleanup_staging.perform_cleanup(tmp_path, ttl_seconds=24 * 3600, dry_run=True)

    assert summary.dry_run is True
    assert summary.removed == 1
    assert stale.exists()


def test_perform_cleanup_removes_stale_directories(tmp_path):
    stale, fresh = _make_dirs(tmp_path)

    summary = cleanup_staging.perform_cleanup(tmp_path, ttl_seconds=24 * 3600, dry_run=False)

    assert summary.removed == 1
    assert not stale.exists()
    assert fresh.exists()


def test_perform_cleanup_on_missing_root(tmp_path):
    summary = cleanup_staging.perform_cleanup(tmp_path / "absent", ttl_seconds=60, dry_run=False)

    assert summary.removed == 0


def test_main_prints_summary(tmp_path, capsys):
    _make_dirs(tmp_path)

    exit_code = cleanup_staging.main(["--root", str(tmp_path), "--ttl-seconds", "3600"])

    assert exit_code == 0
    assert "cleanup done, staging_removed=1" in capsys.readouterr().out


def test_main_requires_root(monkeypatch, capsys):
    monkeypatch.delenv("STAGING_ROOT", raising=False)

    exit_code = cleanup_staging.main([])

    assert exit_code == 2
    assert "staging root not configured" in capsys.readouterr().err
