# build_workflow.py
# Build for betterbuild itself: clean, restore, lint, test, package.
from __future__ import annotations

from enum import Enum

from betterbuild import Build, as_bool, sh, target
from betterbuild.git_facts.git import current_branch, or_default
from betterbuild.tasks.filesystem import delete_directory, ensure_clean_directory, glob_directories


class Configuration(str, Enum):
    DEBUG = "Debug"
    RELEASE = "Release"


def _clean(params):
    for d in glob_directories(params.root / "src", "**/__pycache__", "*.egg-info"):
        delete_directory(d)
    for d in glob_directories(params.root / "tests", "**/__pycache__"):
        delete_directory(d)
    ensure_clean_directory(params.root / params.output)


def workflow():
    build = Build(default="package", name="betterbuild")

    build.parameter(
        "configuration",
        "Configuration to build - Default is 'Debug' (local) or 'Release' (server)",
        default=lambda p: Configuration.DEBUG if p.is_local_build else Configuration.RELEASE,
        convert=Configuration,
    )
    build.parameter("output", "Output directory for distributions", default="output")
    build.parameter("branch", "Branch being built", default=lambda p: or_default("unknown", current_branch, p.root))
    build.parameter("lint", "Run ruff before tests", default=True, convert=as_bool)

    build.register(
        target("clean", "Remove caches and the output directory")
        .before("restore")
        .executes(_clean),

        target("restore", "Install the package and test dependencies")
        .executes(sh("python -m pip install -e '.[test]'")),

        target("lint", "Static checks")
        .depends_on("restore")
        .only_when(lambda p: p.lint)
        .executes(sh("ruff check src tests")),

        target("test", "Run the test suite")
        .depends_on("restore")
        .after("lint")
        .executes(sh("python -m pytest -q")),

        target("package", "Build sdist and wheel")
        .depends_on("clean", "restore", "test")
        .requires("output")
        .executes(sh("python -m build --outdir {output}"))
        .produces("output/*.whl", "output/*.tar.gz"),
    )
    return build
