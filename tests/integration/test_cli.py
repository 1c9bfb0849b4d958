"""
Integration tests for the sndcheck CLI.
"""

import csv
import json

import pytest
from click.testing import CliRunner

from sndcheck import __version__
from sndcheck.cli import cli
from sndcheck.cli import service_helpers
from sndcheck.core import config as config_module

pytestmark = pytest.mark.integration


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keep the user's config files and cached services out of the tests."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    monkeypatch.setattr(
        config_module,
        "CONFIG_LOCATIONS",
        [config_dir / "sndcheck.toml", config_dir / "user.toml"],
    )
    monkeypatch.setattr(service_helpers, "_factory", None)
    return config_dir


class TestCLIBasic:
    """Basic CLI tests."""

    def test_cli_help(self, runner):
        """Top-level help lists the commands."""
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for command in ("check", "batch", "config"):
            assert command in result.output

    def test_version(self, runner):
        """--version prints the package version."""
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_check_help_shows_positionals(self, runner):
        """check documents the positional threshold and bucket size."""
        result = runner.invoke(cli, ["check", "--help"])

        assert result.exit_code == 0
        assert "[THRESHOLD]" in result.output
        assert "[BUCKET_SIZE]" in result.output


class TestCheckCommand:
    """Tests for sndcheck check."""

    def test_text_report(self, runner, half_loud_wav):
        """The default text report shows the score and chart."""
        result = runner.invoke(cli, ["check", half_loud_wav, "--bucket-size", "100"])

        assert result.exit_code == 0, result.output
        assert " buckets: 2" in result.output
        assert "    good: 1" in result.output
        assert " pctgood: 50.00 %" in result.output
        assert "http://sparksvg.me/bar.svg?500,0" in result.output

    def test_positional_parameters(self, runner, half_loud_wav):
        """THRESHOLD and BUCKET_SIZE may be positional."""
        result = runner.invoke(cli, ["check", half_loud_wav, "0.6", "100"])

        assert result.exit_code == 0, result.output
        assert "  thresh: 0.600000" in result.output
        assert " pctgood: 0.00 %" in result.output

    def test_flags_override_positionals(self, runner, half_loud_wav):
        """--threshold wins over the positional value."""
        result = runner.invoke(
            cli, ["check", half_loud_wav, "0.6", "100", "--threshold", "0.1"]
        )

        assert result.exit_code == 0, result.output
        assert " pctgood: 50.00 %" in result.output

    def test_json_format(self, runner, half_loud_wav):
        """JSON output carries every report field."""
        result = runner.invoke(
            cli, ["check", half_loud_wav, "--bucket-size", "100", "--format", "json"]
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["bucket_count"] == 2
        assert data["pct_good"] == 50.0
        assert data["bucket_rms_sequence"] == pytest.approx([0.5, 0.0])
        assert data["channels"] == 1

    def test_csv_and_url_formats(self, runner, half_loud_wav):
        """Charting outputs list the bucket values."""
        csv_result = runner.invoke(
            cli, ["check", half_loud_wav, "-b", "100", "--format", "csv"]
        )
        url_result = runner.invoke(
            cli, ["check", half_loud_wav, "-b", "100", "--format", "url"]
        )

        assert csv_result.output.strip() == "0.5,0.0"
        assert url_result.output.strip() == "http://sparksvg.me/bar.svg?500,0"

    def test_output_file(self, runner, half_loud_wav, tmp_path):
        """--output writes the report instead of printing it."""
        output = tmp_path / "reports" / "take.json"

        result = runner.invoke(
            cli, ["check", half_loud_wav, "-b", "100", "--format", "json", "-o", str(output)]
        )

        assert result.exit_code == 0, result.output
        assert "Report saved" in result.output
        assert json.loads(output.read_text())["good_count"] == 1

    def test_legacy_boundary(self, runner, half_loud_wav):
        """Legacy buckets take bucket_size + 1 samples."""
        result = runner.invoke(
            cli, ["check", half_loud_wav, "-b", "100", "--boundary", "legacy", "--format", "json"]
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["boundary"] == "legacy"
        assert data["bucket_count"] == 1

    def test_stereo_file(self, runner, stereo_wav):
        """Stereo input is downmixed."""
        result = runner.invoke(cli, ["check", stereo_wav, "-b", "100", "--format", "json"])

        data = json.loads(result.output)
        assert data["channels"] == 2
        assert data["mean"] == pytest.approx(0.4, rel=1e-6)

    def test_quality_gate_passes(self, runner, half_loud_wav):
        """Meeting the bar exits 0."""
        result = runner.invoke(cli, ["check", half_loud_wav, "-b", "100", "--min-pct-good", "50"])

        assert result.exit_code == 0

    def test_quality_gate_fails(self, runner, half_loud_wav):
        """Missing the bar exits 1 after printing the report."""
        result = runner.invoke(cli, ["check", half_loud_wav, "-b", "100", "--min-pct-good", "60"])

        assert result.exit_code == 1
        assert " pctgood: 50.00 %" in result.output
        assert "required 60.00%" in result.output

    def test_quality_gate_without_data(self, runner, short_wav):
        """A file with no buckets cannot meet a non-zero bar."""
        result = runner.invoke(cli, ["check", short_wav, "--min-pct-good", "1"])

        assert result.exit_code == 1
        assert "no data" in result.output

    def test_short_file_without_gate(self, runner, short_wav):
        """No buckets is not an error on its own."""
        result = runner.invoke(cli, ["check", short_wav])

        assert result.exit_code == 0
        assert " pctgood: no data" in result.output

    def test_missing_file(self, runner, tmp_path):
        """A missing file exits 3."""
        result = runner.invoke(cli, ["check", str(tmp_path / "missing.wav")])

        assert result.exit_code == 3
        assert "Error:" in result.output

    @pytest.mark.parametrize(
        "args",
        [
            ["--threshold", "1.5"],
            ["--bucket-size", "0"],
            ["--boundary", "sloppy"],
            ["--block-frames", "0"],
            ["--min-pct-good", "101"],
        ],
    )
    def test_invalid_parameters(self, runner, half_loud_wav, args):
        """Bad analysis parameters exit 2 before any decoding."""
        result = runner.invoke(cli, ["check", half_loud_wav, *args])

        assert result.exit_code == 2

    def test_config_file_values(self, runner, half_loud_wav, tmp_path):
        """--config supplies defaults the flags do not set."""
        config_path = tmp_path / "custom.toml"
        config_path.write_text('[analysis]\nbucket_size = 100\n\n[output]\nformat = "url"\n')

        result = runner.invoke(cli, ["--config", str(config_path), "check", half_loud_wav])

        assert result.exit_code == 0, result.output
        assert result.output.strip() == "http://sparksvg.me/bar.svg?500,0"

    def test_search_path_config(self, runner, half_loud_wav, isolated_config):
        """A config found on the search path is applied."""
        (isolated_config / "sndcheck.toml").write_text("[analysis]\nthreshold = 0.7\nbucket_size = 100\n")

        result = runner.invoke(cli, ["check", half_loud_wav])

        assert "  thresh: 0.700000" in result.output
        assert " bkt_siz: 100" in result.output

    def test_invalid_config_file(self, runner, half_loud_wav, tmp_path):
        """Invalid config values exit 2."""
        config_path = tmp_path / "bad.toml"
        config_path.write_text("[analysis]\nthreshold = -1.0\n")

        result = runner.invoke(cli, ["--config", str(config_path), "check", half_loud_wav])

        assert result.exit_code == 2
        assert "threshold" in result.output

    def test_missing_config_file(self, runner, half_loud_wav, tmp_path):
        """A missing --config file exits 2."""
        result = runner.invoke(
            cli, ["--config", str(tmp_path / "none.toml"), "check", half_loud_wav]
        )

        assert result.exit_code == 2

    @pytest.mark.parametrize("flag", ["-v", "-q"])
    def test_verbosity_flags(self, runner, half_loud_wav, flag):
        """Verbosity flags do not change the report."""
        result = runner.invoke(cli, [flag, "check", half_loud_wav, "-b", "100", "--format", "url"])

        assert result.exit_code == 0
        assert "http://sparksvg.me/bar.svg?500,0" in result.output


class TestBatchCommand:
    """Tests for sndcheck batch."""

    def test_directory(self, runner, audio_dir):
        """Every audio file is scored."""
        result = runner.invoke(cli, ["batch", str(audio_dir), "-b", "100"])

        assert result.exit_code == 0, result.output
        assert "Analyzed 4 of 4 files: 0 failed, 0 below threshold" in result.output

    def test_no_recursive(self, runner, audio_dir):
        """Nested files are skipped without recursion."""
        result = runner.invoke(cli, ["batch", str(audio_dir), "-b", "100", "--no-recursive"])

        assert "Analyzed 3 of 3 files" in result.output

    def test_below_threshold_exit_code(self, runner, audio_dir):
        """Any file under the bar makes the batch exit 1."""
        result = runner.invoke(cli, ["batch", str(audio_dir), "-b", "100", "--min-pct-good", "50"])

        assert result.exit_code == 1
        assert "1 below threshold" in result.output

    def test_csv_output(self, runner, audio_dir, tmp_path):
        """--output writes one CSV row per file."""
        output = tmp_path / "scores.csv"

        result = runner.invoke(cli, ["batch", str(audio_dir), "-b", "100", "-o", str(output)])

        assert result.exit_code == 0, result.output
        with open(output, newline="") as f:
            rows = list(csv.DictReader(f))
        assert [row["filepath"].rsplit("/", 1)[-1] for row in rows] == [
            "a_loud.wav",
            "b_loud.wav",
            "c_quiet.wav",
            "d_loud.wav",
        ]

    def test_empty_directory(self, runner, tmp_path):
        """No audio files exits 3."""
        empty = tmp_path / "empty"
        empty.mkdir()

        result = runner.invoke(cli, ["batch", str(empty)])

        assert result.exit_code == 3
        assert "No audio files" in result.output

    def test_recursive_from_config(self, runner, audio_dir, tmp_path):
        """[batch] recursive = false applies when no flag is given."""
        config_path = tmp_path / "batch.toml"
        config_path.write_text("[batch]\nrecursive = false\n")

        result = runner.invoke(
            cli, ["--config", str(config_path), "batch", str(audio_dir), "-b", "100"]
        )

        assert "Analyzed 3 of 3 files" in result.output


class TestConfigCommands:
    """Tests for sndcheck config."""

    def test_show_defaults(self, runner):
        """show lists sections and their source."""
        result = runner.invoke(cli, ["config", "show"])

        assert result.exit_code == 0
        assert "defaults" in result.output
        assert "[analysis]" in result.output
        assert "bucket_size = 22000" in result.output

    def test_show_explicit(self, runner, tmp_path):
        """show reflects the --config file."""
        config_path = tmp_path / "custom.toml"
        config_path.write_text("[analysis]\nbucket_size = 4410\n")

        result = runner.invoke(cli, ["--config", str(config_path), "config", "show"])

        assert "bucket_size = 4410" in result.output

    def test_init(self, runner):
        """init writes a default file and refuses to overwrite it."""
        with runner.isolated_filesystem():
            first = runner.invoke(cli, ["config", "init"])
            second = runner.invoke(cli, ["config", "init"])
            forced = runner.invoke(cli, ["config", "init", "--force"])

            assert first.exit_code == 0
            assert "Created configuration file" in first.output
            assert second.exit_code == 1
            assert "already exists" in second.output
            assert forced.exit_code == 0

    def test_path(self, runner, isolated_config):
        """path lists the search locations."""
        result = runner.invoke(cli, ["config", "path"])

        assert result.exit_code == 0
        assert "highest priority first" in result.output
        assert "sndcheck.toml" in result.output
        assert "active" not in result.output

    def test_path_marks_explicit_config(self, runner, tmp_path):
        """An existing --config file is listed first and is the active one."""
        config_path = tmp_path / "explicit.toml"
        config_path.write_text("[analysis]\nthreshold = 0.2\n")

        result = runner.invoke(cli, ["--config", str(config_path), "config", "path"])

        assert result.exit_code == 0
        assert "(--config)" in result.output
        assert "active" in result.output


class TestInjectedFactory:
    """Tests for swapping the services the CLI uses."""

    def test_mock_repository_factory(self, runner, half_loud_wav, monkeypatch):
        """Commands go through the factory's repository."""
        from sndcheck.services import ServiceFactory
        from tests.mocks.mock_repository import MockFileRepository

        factory = ServiceFactory(file_repository=MockFileRepository())
        monkeypatch.setattr(service_helpers, "_factory", factory)

        result = runner.invoke(cli, ["check", half_loud_wav])

        # The real file is invisible to the empty mock filesystem
        assert result.exit_code == 3
        assert "does not exist" in result.output


class TestBrokenConfigRecovery:
    """The config commands keep working while the config files are broken."""

    @pytest.fixture
    def bad_value(self, isolated_config):
        path = isolated_config / "sndcheck.toml"
        path.write_text("[analysis]\nthreshold = 5.0\n")
        return path

    @pytest.fixture
    def bad_syntax(self, isolated_config):
        path = isolated_config / "sndcheck.toml"
        path.write_text("[analysis\nthreshold = 0.2\n")
        return path

    def test_analysis_commands_refuse_bad_value(self, runner, half_loud_wav, bad_value):
        """check exits 2 and names the offending setting."""
        result = runner.invoke(cli, ["check", half_loud_wav])

        assert result.exit_code == 2
        assert "threshold" in result.output

    def test_init_force_repairs_bad_value(self, runner, half_loud_wav, bad_value):
        """init --force overwrites the broken file, after which check runs again."""
        init = runner.invoke(cli, ["config", "init", "--force", "-o", str(bad_value)])
        check = runner.invoke(cli, ["check", half_loud_wav, "--format", "url"])

        assert init.exit_code == 0, init.output
        assert check.exit_code == 0, check.output

    def test_init_force_repairs_bad_syntax(self, runner, bad_syntax):
        """A file that is not TOML can be replaced too."""
        result = runner.invoke(cli, ["config", "init", "--force", "-o", str(bad_syntax)])

        assert result.exit_code == 0, result.output
        assert "[analysis]" in bad_syntax.read_text()

    def test_path_with_bad_value(self, runner, bad_value):
        """path lists the broken file as the active one."""
        result = runner.invoke(cli, ["config", "path"])

        assert result.exit_code == 0, result.output
        assert "active" in result.output

    def test_path_with_bad_syntax(self, runner, bad_syntax):
        """path does not parse the files it lists."""
        result = runner.invoke(cli, ["config", "path"])

        assert result.exit_code == 0, result.output

    def test_show_flags_bad_value(self, runner, bad_value):
        """show prints the merged values and the validation error."""
        result = runner.invoke(cli, ["config", "show"])

        assert result.exit_code == 0, result.output
        assert "threshold = 5.0" in result.output
        assert "Invalid" in result.output

    def test_show_with_bad_syntax(self, runner, bad_syntax):
        """A file that cannot be parsed cannot be shown."""
        result = runner.invoke(cli, ["config", "show"])

        assert result.exit_code == 2

    def test_unknown_log_level(self, runner, half_loud_wav, isolated_config):
        """[logging] level must be a known level name."""
        (isolated_config / "sndcheck.toml").write_text('[logging]\nlevel = "chatty"\n')

        result = runner.invoke(cli, ["check", half_loud_wav])

        assert result.exit_code == 2
        assert "logging.level" in result.output
