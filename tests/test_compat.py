from __future__ import annotations

import subprocess

from nirify import compat
from nirify.compat import (
    FeatureCompat,
    NiriFeature,
    NiriVersion,
    detect_niri_version,
    parse_version_output,
    unsupported_features,
)


def test_parse_versions():
    assert NiriVersion.parse("25.08") == NiriVersion(25, 8)
    assert NiriVersion.parse("25.08-123-g4310c20c") == NiriVersion(25, 8)
    assert NiriVersion.parse("invalid") is None
    assert NiriVersion.parse("") is None
    assert NiriVersion.parse("25") is None


def test_ordering_and_display():
    assert NiriVersion(25, 8) < NiriVersion(25, 11) < NiriVersion(26, 0)
    assert NiriVersion(25, 11).at_least(25, 8)
    assert not NiriVersion(25, 8).at_least(25, 11)
    assert str(NiriVersion(25, 8)) == "25.08"


def test_feature_support():
    assert not NiriFeature.RECENT_WINDOWS.is_supported_by(NiriVersion(25, 8))
    assert NiriFeature.RECENT_WINDOWS.is_supported_by(NiriVersion(25, 11))
    assert unsupported_features(NiriVersion(25, 8)) == [NiriFeature.RECENT_WINDOWS]
    assert unsupported_features(NiriVersion(26, 1)) == []


def test_feature_compat():
    assert FeatureCompat.from_version(None).recent_windows is False
    assert FeatureCompat.from_version(NiriVersion(25, 11)).recent_windows is True
    assert FeatureCompat.all_enabled().recent_windows is True


def test_parse_version_output():
    assert parse_version_output("niri 25.08 (abcdef0)\n") == NiriVersion(25, 8)
    assert parse_version_output("niri 25.11-12-gabc\n") == NiriVersion(25, 11)
    assert parse_version_output("niri unknown") is None


def test_detect_without_binary(monkeypatch):
    def missing(*args, **kwargs):
        raise FileNotFoundError("niri")

    monkeypatch.setattr(compat.subprocess, "run", missing)
    assert detect_niri_version() is None


def test_detect_reads_stdout(monkeypatch):
    def fake_run(cmd, **kwargs):
        assert cmd == ["niri", "--version"]
        return subprocess.CompletedProcess(cmd, 0, stdout="niri 25.11 (1234)\n", stderr="")

    monkeypatch.setattr(compat.subprocess, "run", fake_run)
    assert detect_niri_version() == NiriVersion(25, 11)
