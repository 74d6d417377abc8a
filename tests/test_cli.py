"""Unit tests for nodevuln.cli — argument handling and exit status."""

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from nodevuln.classifier import SupportStatus
from nodevuln.cli import build_parser, detect_node_version, main
from nodevuln.errors import FetchError, VersionLookupError
from nodevuln.verdict import Finding, Verdict

SAFE = Verdict(blocked=False, status=SupportStatus.SUPPORTED)
VULNERABLE = Verdict(
    blocked=True,
    reasons=["CVE-2022-32212: DNS rebinding\nPatched versions: >=18.5.1"],
    status=SupportStatus.SUPPORTED,
    findings=[Finding(key="1", identifier="CVE-2022-32212", overview="DNS rebinding", patched=">=18.5.1")],
)


@pytest.fixture(autouse=True)
def _isolated(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("NODEVULN_CACHE_DIR", str(tmp_path / "cache"))


# ── build_parser ─────────────────────────────────────────────────────────────


class TestBuildParser:
    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.version is None
        assert args.refresh is False
        assert args.verbose is False

    def test_refresh_flag(self):
        assert build_parser().parse_args(["-r"]).refresh is True

    def test_version_and_config(self):
        args = build_parser().parse_args(["v20.1.0", "--config", "x.yaml"])
        assert args.version == "v20.1.0"
        assert args.config == Path("x.yaml")


# ── detect_node_version ──────────────────────────────────────────────────────


class TestDetectNodeVersion:
    def test_strips_output(self):
        completed = MagicMock(stdout="v20.11.1\n")
        with patch("nodevuln.cli.subprocess.run", return_value=completed) as run:
            assert detect_node_version() == "v20.11.1"
        assert run.call_args.args[0] == ["node", "--version"]

    def test_missing_node(self):
        with patch("nodevuln.cli.subprocess.run", side_effect=FileNotFoundError("node")):
            with pytest.raises(FileNotFoundError):
                detect_node_version()


# ── main ─────────────────────────────────────────────────────────────────────


class TestMain:
    def test_safe_exits_zero(self, capsys):
        with patch("nodevuln.cli.check", return_value=SAFE):
            assert main(["v22.4.1"]) == 0
        assert "is safe" in capsys.readouterr().out

    def test_blocked_exits_one(self, capsys):
        with patch("nodevuln.cli.check", return_value=VULNERABLE):
            assert main(["v18.5.0"]) == 1
        err = capsys.readouterr().err
        assert "CVE-2022-32212" in err

    def test_refresh_passed_through(self):
        with patch("nodevuln.cli.check", return_value=SAFE) as chk:
            main(["v22.4.1", "-r"])
        assert chk.call_args.kwargs["refresh"] is True

    def test_uses_env_cache_dir(self, tmp_path: Path):
        with patch("nodevuln.cli.check", return_value=SAFE) as chk:
            main(["v22.4.1"])
        assert chk.call_args.kwargs["settings"].cache_dir == tmp_path / "cache"

    def test_defaults_to_installed_node(self):
        with patch("nodevuln.cli.detect_node_version", return_value="v22.4.1"), patch(
            "nodevuln.cli.check", return_value=SAFE
        ) as chk:
            assert main([]) == 0
        assert chk.call_args.args[0] == "v22.4.1"

    def test_node_not_installed(self, capsys):
        with patch("nodevuln.cli.detect_node_version", side_effect=FileNotFoundError("node")):
            assert main([]) == 1
        assert "Could not determine" in capsys.readouterr().err

    def test_node_fails(self):
        err = subprocess.CalledProcessError(1, ["node", "--version"])
        with patch("nodevuln.cli.detect_node_version", side_effect=err):
            assert main([]) == 1

    def test_fetch_error_exits_one(self, capsys):
        with patch("nodevuln.cli.check", side_effect=FetchError("HEAD failed")):
            assert main(["v22.4.1"]) == 1
        assert "HEAD failed" in capsys.readouterr().err

    def test_lookup_error_exits_one(self, capsys):
        with patch("nodevuln.cli.check", side_effect=VersionLookupError("Could not fetch version information for 99.0.0")):
            assert main(["99.0.0"]) == 1
        assert "99.0.0" in capsys.readouterr().err

    def test_invalid_config(self, tmp_path: Path, capsys):
        cfg = tmp_path / "bad.yaml"
        cfg.write_text("read_timeout: -5\n")
        assert main(["v22.4.1", "--config", str(cfg)]) == 1
        assert "Invalid configuration" in capsys.readouterr().err

    def test_unknown_flag(self):
        with pytest.raises(SystemExit) as exc:
            main(["--bogus"])
        assert exc.value.code == 2
