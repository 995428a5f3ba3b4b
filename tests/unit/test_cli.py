"""Tests for the tubesync-sync command."""

from pathlib import Path
from unittest.mock import patch

import pytest

from tubesync import cli
from tubesync.sync.errors import SyncCancelled
from tubesync.sync.models import ChannelResult, SyncStats


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("VIDEO_LOCATION", "CHANNEL_IDS", "EPISODES", "AUTO_DELETE_PLAYED", "DRY_RUN"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def orchestrator():
    with patch("tubesync.cli.SyncOrchestrator") as cls:
        instance = cls.return_value
        instance.run.return_value = SyncStats(channels_total=1, channels_synced=1)
        yield instance


class TestMain:
    """Test cli.main()."""

    def test_sync_with_overrides(self, tmp_path: Path, orchestrator, capsys) -> None:
        """Test command-line overrides reach the run configuration."""
        code = cli.main([
            "--channels", "UC1,UC2",
            "--video-location", str(tmp_path),
            "--episodes", "5",
            "--auto-delete",
        ])

        assert code == 0
        config = orchestrator.run.call_args.args[0]
        assert config.channel_ids == ("UC1", "UC2")
        assert config.video_location == tmp_path
        assert config.episodes == 5
        assert config.auto_delete_played is True
        assert config.dry_run is False
        assert "SYNC COMPLETE" in capsys.readouterr().out

    def test_dry_run(self, tmp_path: Path, orchestrator, capsys) -> None:
        code = cli.main(["--video-location", str(tmp_path), "--dry-run"])

        assert code == 0
        assert orchestrator.run.call_args.args[0].dry_run is True
        assert "[DRY RUN]" in capsys.readouterr().out

    def test_dry_run_from_environment(self, tmp_path: Path, orchestrator, monkeypatch, capsys) -> None:
        """Test DRY_RUN in the environment is reflected in the summary."""
        monkeypatch.setenv("DRY_RUN", "true")

        code = cli.main(["--video-location", str(tmp_path)])

        assert code == 0
        assert orchestrator.run.call_args.args[0].dry_run is True
        assert "[DRY RUN]" in capsys.readouterr().out

    def test_failed_channel_exit_code(self, tmp_path: Path, orchestrator) -> None:
        """Test a run with a failed channel exits non-zero."""
        stats = SyncStats(channels_total=1)
        stats.add(ChannelResult(channel_id="UC1", status="failed", error="boom"))
        orchestrator.run.return_value = stats

        assert cli.main(["--video-location", str(tmp_path), "--channels", "UC1"]) == 1

    def test_cancelled(self, tmp_path: Path, orchestrator) -> None:
        orchestrator.run.side_effect = SyncCancelled("sync run cancelled")

        assert cli.main(["--video-location", str(tmp_path)]) == 130

    def test_missing_video_location(self, tmp_path: Path, monkeypatch, capsys) -> None:
        """Test a run without a library location reports a configuration error."""
        monkeypatch.chdir(tmp_path)

        code = cli.main(["--channels", "UC1"])

        assert code == 1
        assert "VIDEO_LOCATION is not set" in capsys.readouterr().out

    def test_invalid_episodes(self, tmp_path: Path, orchestrator) -> None:
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--video-location", str(tmp_path), "--episodes", "0"])

        assert exc_info.value.code == 2
        orchestrator.run.assert_not_called()

    def test_show_config(self, tmp_path: Path, monkeypatch, capsys) -> None:
        monkeypatch.setenv("VIDEO_LOCATION", str(tmp_path))
        monkeypatch.setenv("CHANNEL_IDS", "UCa,UCb")

        assert cli.main(["--config"]) == 0

        out = capsys.readouterr().out
        assert str(tmp_path) in out
        assert "UCa, UCb" in out

    @pytest.mark.parametrize("version,expected", [("2024.08.06", 0), (None, 1)])
    def test_check(self, version, expected: int) -> None:
        with patch("tubesync.cli.YtDlp.version", return_value=version):
            assert cli.main(["--check"]) == expected
