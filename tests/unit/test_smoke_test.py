"""Unit tests for the Smoke Tester phase."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from nimrelease.config import ReleaseSettings
from nimrelease.models.reports import PhaseState
from nimrelease.stages.base import PhaseFailure
from nimrelease.stages.smoke_test import SmokeTestPhase

GOOD_VERSION = "Nim Compiler Version 1.4.8 [Linux: amd64]\nCompiled at 2020-10-16\n"


@pytest.fixture
def good_runner(fake_runner):
    fake_runner.on(("bin/nim", "-v"), output=GOOD_VERSION)
    return fake_runner


def _tree(settings) -> Path:
    return settings.work_dir / "smoke-1.4.8" / "nim-1.4.8"


class TestSmokeTestSuccess:
    def test_full_command_sequence(self, settings, good_runner, context, source_tarball):
        report = SmokeTestPhase(settings, good_runner).run_phase(context)

        assert report.state == PhaseState.PASSED
        assert good_runner.commands == [
            ("sh", "build.sh"),
            ("bin/nim", "-v"),
            ("bin/nim", "c", "koch"),
            ("./koch", "boot", "-d:release"),
            ("./koch", "tests", "--nim:bin/nim", "cat", "megatest"),
            ("./koch", "tests", "--nim:bin/nim", "cat", "lib"),
            ("./koch", "nimble"),
            ("bin/nimble", "install", "-y", "--nim:bin/nim", "fusion"),
            ("bin/nimble", "install", "-y", "--nim:bin/nim", "cligen"),
        ]

    def test_tarball_copied_and_extracted(
        self, settings, good_runner, context, source_tarball
    ):
        SmokeTestPhase(settings, good_runner).run_phase(context)
        scratch = settings.work_dir / "smoke-1.4.8"
        assert (scratch / "nim-1.4.8.tar.xz").read_bytes() == source_tarball.read_bytes()
        assert (_tree(settings) / "build.sh").is_file()

    def test_commands_run_in_tree_with_sanitized_path(
        self, settings, good_runner, context, source_tarball
    ):
        before_cwd = Path.cwd()
        before_path = os.environ.get("PATH")

        SmokeTestPhase(settings, good_runner).run_phase(context)

        tree = _tree(settings).resolve()
        expected_path = [str(_tree(settings) / "bin"), *settings.sanitized_path_dirs]
        for call in good_runner.calls:
            assert call.cwd.resolve() == tree
            assert call.path_env.split(os.pathsep) == expected_path
        assert Path.cwd() == before_cwd
        assert os.environ.get("PATH") == before_path

    def test_not_in_path_env_only_for_test_suite(
        self, settings, good_runner, context, source_tarball
    ):
        SmokeTestPhase(settings, good_runner).run_phase(context)
        for call in good_runner.calls:
            in_tests = call.args[:2] == ("./koch", "tests")
            assert (call.env.get("NIM_EXE_NOT_IN_PATH") == "NOT_IN_PATH") == in_tests
        assert "NIM_EXE_NOT_IN_PATH" not in os.environ

    def test_version_output_captured(self, settings, good_runner, context, source_tarball):
        SmokeTestPhase(settings, good_runner).run_phase(context)
        assert good_runner.find("bin/nim", "-v").capture is True

    def test_rerun_starts_from_fresh_scratch(
        self, settings, good_runner, context, source_tarball
    ):
        phase = SmokeTestPhase(settings, good_runner)
        phase.run_phase(context)
        stray = _tree(settings) / "bin" / "nim"
        stray.write_text("stale build output")

        phase.run_phase(context)

        assert not stray.exists()


class TestVersionCheckFailure:
    """A wrong version string is a soft failure that skips later steps."""

    def test_soft_failure_skips_remaining_steps(
        self, settings, fake_runner, context, source_tarball, caplog
    ):
        fake_runner.on(("bin/nim", "-v"), output="Nim Compiler Version 1.4.6 [Linux: amd64]\n")

        with caplog.at_level("WARNING"):
            report = SmokeTestPhase(settings, fake_runner).run_phase(context)

        assert report.state == PhaseState.FAILED
        assert report.summary == "Version check: failure"
        assert "Version check: failure" in caplog.text
        assert fake_runner.commands == [("sh", "build.sh"), ("bin/nim", "-v")]

    def test_version_on_second_line_does_not_count(
        self, settings, fake_runner, context, source_tarball
    ):
        fake_runner.on(("bin/nim", "-v"), output="garbage\nVersion 1.4.8\n")
        report = SmokeTestPhase(settings, fake_runner).run_phase(context)
        assert report.state == PhaseState.FAILED

    def test_binary_that_cannot_run_is_soft_failure(
        self, settings, fake_runner, context, source_tarball
    ):
        fake_runner.on(("bin/nim", "-v"), returncode=127)
        report = SmokeTestPhase(settings, fake_runner).run_phase(context)
        assert report.state == PhaseState.FAILED

    def test_state_restored_after_soft_failure(
        self, settings, fake_runner, context, source_tarball
    ):
        before_cwd, before_path = Path.cwd(), os.environ.get("PATH")
        SmokeTestPhase(settings, fake_runner).run_phase(context)
        assert Path.cwd() == before_cwd
        assert os.environ.get("PATH") == before_path


class TestHardFailures:
    def test_build_failure_aborts(self, settings, good_runner, context, source_tarball):
        good_runner.on(("sh", "build.sh"), returncode=2)
        before_path = os.environ.get("PATH")

        with pytest.raises(PhaseFailure) as excinfo:
            SmokeTestPhase(settings, good_runner).run_phase(context)

        assert str(excinfo.value) == "FAILURE: sh build.sh\nPHASE: test"
        assert os.environ.get("PATH") == before_path

    def test_failing_package_install_aborts(
        self, settings, good_runner, context, source_tarball
    ):
        good_runner.on(("bin/nimble", "install", "-y", "--nim:bin/nim", "fusion"), returncode=1)
        with pytest.raises(PhaseFailure, match="PHASE: test"):
            SmokeTestPhase(settings, good_runner).run_phase(context)
        assert good_runner.commands[-1][-1] == "fusion"

    def test_missing_tarball(self, settings, fake_runner, context):
        with pytest.raises(PhaseFailure, match="source tarball not found"):
            SmokeTestPhase(settings, fake_runner).run_phase(context)
        assert fake_runner.calls == []


class TestRelativeWorkDir:
    def test_fresh_binaries_first_on_path(
        self, tmp_path, good_runner, context, source_tarball, monkeypatch
    ):
        monkeypatch.chdir(tmp_path)
        settings = ReleaseSettings(_env_file=None, web_root="www", work_dir="work")

        report = SmokeTestPhase(settings, good_runner).run_phase(context)

        assert report.state == PhaseState.PASSED
        tree = tmp_path / "work" / "smoke-1.4.8" / "nim-1.4.8"
        for call in good_runner.calls:
            first = call.path_env.split(os.pathsep)[0]
            assert os.path.isabs(first)
            assert Path(first) == tree / "bin"
