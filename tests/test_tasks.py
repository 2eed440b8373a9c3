"""Tests for filesystem helpers, git facts and environment detection."""

import subprocess

import pytest

from betterbuild import env
from betterbuild.git_facts import git
from betterbuild.tasks.filesystem import delete_directory, ensure_clean_directory, glob_directories


class TestFilesystem:
    def test_glob_directories(self, tmp_path):
        (tmp_path / "a" / "bin").mkdir(parents=True)
        (tmp_path / "a" / "obj").mkdir()
        (tmp_path / "b" / "bin").mkdir(parents=True)
        (tmp_path / "a" / "bin.txt").write_text("")
        found = glob_directories(tmp_path, "**/bin", "**/obj")
        assert sorted(p.relative_to(tmp_path).as_posix() for p in found) == ["a/bin", "a/obj", "b/bin"]

    def test_glob_missing_root(self, tmp_path):
        assert glob_directories(tmp_path / "missing", "**/bin") == []

    def test_delete_directory(self, tmp_path):
        d = tmp_path / "obj"
        (d / "nested").mkdir(parents=True)
        delete_directory(d)
        assert not d.exists()
        delete_directory(d)  # already gone

    def test_ensure_clean_directory(self, tmp_path):
        out = tmp_path / "output"
        (out / "app").mkdir(parents=True)
        (out / "pkg.nupkg").write_text("x")
        assert ensure_clean_directory(out) == out
        assert out.is_dir()
        assert list(out.iterdir()) == []

    def test_ensure_clean_creates(self, tmp_path):
        out = ensure_clean_directory(tmp_path / "new" / "output")
        assert out.is_dir()


class TestEnvironment:
    def test_local_by_default(self):
        assert env.is_local_build({})

    @pytest.mark.parametrize("var", ["CI", "GITHUB_ACTIONS", "TF_BUILD", "JENKINS_URL"])
    def test_ci_variables(self, var):
        assert env.is_server_build({var: "true"})

    def test_false_values_ignored(self):
        assert env.is_local_build({"CI": "false"})

    def test_env_var_name(self):
        assert env.env_var_name("out-dir") == "OUT_DIR"
        assert env.env_var_name("runtime", "BB_") == "BB_RUNTIME"


class TestGitFacts:
    def test_current_branch(self, monkeypatch):
        monkeypatch.setattr(git, "_git", lambda args, cwd=None: "main")
        assert git.current_branch() == "main"

    def test_detached_head_uses_short_sha(self, monkeypatch):
        answers = {"--abbrev-ref": "HEAD", "--short": "abc1234"}

        def fake(args, cwd=None):
            return answers[args[1]]

        monkeypatch.setattr(git, "_git", fake)
        assert git.current_branch() == "abc1234"

    def test_is_dirty(self, monkeypatch):
        monkeypatch.setattr(git, "_git", lambda args, cwd=None: " M src/betterbuild/dag.py")
        assert git.is_dirty()

    def test_or_default_outside_repo(self, monkeypatch):
        def fail(args, cwd=None):
            raise subprocess.CalledProcessError(128, ["git", *args])

        monkeypatch.setattr(git, "_git", fail)
        assert git.or_default("unknown", git.head_sha) == "unknown"
