"""
Unit tests for install planning and execution.
"""

import shutil
import subprocess
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from fakes import RecordingInstaller

from repobootstrap.core.config import BootstrapConfig, InstallConfig
from repobootstrap.core.exceptions import InstallFailure
from repobootstrap.core.models import CloneOutcome, ManifestKind, RepositoryResult
from repobootstrap.core.pipeline import PipelineState
from repobootstrap.installation.installer import PipInstaller
from repobootstrap.installation.planner import InstallPlanner
from repobootstrap.installation.stage import InstallationStage


def _make_repo(root: Path, name: str, *files: str) -> None:
    repo = root / name
    repo.mkdir(parents=True, exist_ok=True)
    for filename in files:
        (repo / filename).write_text("")


class TestInstallPlanner(unittest.TestCase):
    """Tests for install list construction."""

    def setUp(self):
        self.tmpdir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def test_plan_filters_and_preserves_order(self):
        """Test manifest filtering, extra deps and ordering together."""
        _make_repo(self.tmpdir, "x", "pyproject.toml")
        _make_repo(self.tmpdir, "y", "README.md")
        _make_repo(self.tmpdir, "z", "setup.py")
        results = [
            RepositoryResult("x", CloneOutcome.SKIPPED),
            RepositoryResult("y", CloneOutcome.CLONED),
            RepositoryResult("z", CloneOutcome.CLONED),
        ]

        tasks = InstallPlanner(self.tmpdir, {"z": ["libfoo"]}).plan(results)

        self.assertEqual([t.repository_name for t in tasks], ["x", "z"])
        self.assertEqual(tasks[0].manifest_kind, ManifestKind.PYPROJECT_TOML)
        self.assertEqual(tasks[0].extra_deps, ())
        self.assertEqual(tasks[1].manifest_kind, ManifestKind.SETUP_PY)
        self.assertEqual(tasks[1].extra_deps, ("libfoo",))
        self.assertEqual(tasks[1].path, self.tmpdir / "z")

    def test_failed_results_are_not_planned(self):
        """Test that failed repositories never get install tasks."""
        _make_repo(self.tmpdir, "angr", "setup.py")
        results = [RepositoryResult("angr", CloneOutcome.FAILED, error_log="boom")]

        self.assertEqual(InstallPlanner(self.tmpdir).plan(results), [])

    def test_setup_py_takes_priority(self):
        """Test manifest probe order."""
        _make_repo(self.tmpdir, "both", "pyproject.toml", "setup.py")

        kind = InstallPlanner.detect_manifest(self.tmpdir / "both")

        self.assertEqual(kind, ManifestKind.SETUP_PY)

    def test_missing_directory_has_no_manifest(self):
        """Test probing a directory that does not exist."""
        kind = InstallPlanner.detect_manifest(self.tmpdir / "missing")
        self.assertEqual(kind, ManifestKind.NONE)

    def test_extra_dependencies_are_frozen(self):
        """Test that later edits to the source mapping have no effect."""
        _make_repo(self.tmpdir, "pyvex", "setup.py")
        extra = {"pyvex": ["--pre", "capstone"]}
        planner = InstallPlanner(self.tmpdir, extra)
        extra["pyvex"].append("unicorn")

        tasks = planner.plan([RepositoryResult("pyvex", CloneOutcome.CLONED)])

        self.assertEqual(tasks[0].extra_deps, ("--pre", "capstone"))
        with self.assertRaises(TypeError):
            planner.extra_dependencies["angr"] = ("x",)


class TestPipInstaller(unittest.TestCase):
    """Tests for pip command construction."""

    def _completed(self, returncode=0, stdout="Successfully installed\n"):
        return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout)

    @mock.patch("repobootstrap.installation.installer.subprocess.run")
    def test_install_editable(self, run):
        """Test the editable install command."""
        run.return_value = self._completed()
        installer = PipInstaller(InstallConfig(pip_options=["-q"]), python_executable="py")

        installer.install_editable(Path("/ws/angr"))

        cmd = run.call_args[0][0]
        self.assertEqual(
            cmd,
            ["py", "-m", "pip", "install", "-q", "--no-build-isolation", "-e", "/ws/angr"],
        )

    @mock.patch("repobootstrap.installation.installer.subprocess.run")
    def test_install_packages_passes_options_through(self, run):
        """Test that specifiers may contain pip options."""
        run.return_value = self._completed()
        installer = PipInstaller(InstallConfig(), python_executable="py")

        installer.install_packages(["--pre", "capstone"])

        cmd = run.call_args[0][0]
        self.assertEqual(cmd, ["py", "-m", "pip", "install", "--pre", "capstone"])

    @mock.patch("repobootstrap.installation.installer.subprocess.run")
    def test_failure_raises_with_output(self, run):
        """Test that a non-zero pip exit raises InstallFailure."""
        run.return_value = self._completed(1, "ERROR: No matching distribution\n")
        installer = PipInstaller(InstallConfig(), python_executable="py")

        with self.assertRaises(InstallFailure) as ctx:
            installer.install_packages(["nonexistent-pkg"])

        self.assertIn("No matching distribution", ctx.exception.log)
        self.assertEqual(ctx.exception.stage, "Installation")


class TestInstallationStage(unittest.TestCase):
    """Tests for the installation pipeline stage."""

    def setUp(self):
        self.tmpdir = Path(tempfile.mkdtemp())
        self.config = BootstrapConfig(workspace_dir=str(self.tmpdir))
        self.config.installation.build_prerequisites = ["-U", "pip"]
        self.config.installation.post_install_packages = []
        self.config.installation.extra_dependencies = {"z": ["libfoo"]}
        _make_repo(self.tmpdir, "x", "pyproject.toml")
        _make_repo(self.tmpdir, "y")
        _make_repo(self.tmpdir, "z", "setup.py")
        self.state = PipelineState(pipeline_id="test", repositories=["x", "y", "z"])
        self.state.data["acquisition"] = [
            RepositoryResult("x", CloneOutcome.SKIPPED),
            RepositoryResult("y", CloneOutcome.CLONED),
            RepositoryResult("z", CloneOutcome.CLONED),
        ]

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def test_install_order(self):
        """Test that extra dependencies precede their repository."""
        installer = RecordingInstaller()
        stage = InstallationStage(self.config, installer=installer)

        tasks, metrics = stage.execute(self.state)

        self.assertEqual([t.repository_name for t in tasks], ["x", "z"])
        self.assertEqual(installer.calls, [
            ("packages", ("-U", "pip")),
            ("editable", "x"),
            ("packages", ("libfoo",)),
            ("editable", "z"),
        ])
        self.assertEqual(metrics["installed"], 2)
        self.assertEqual(metrics["extra_dependency_steps"], 1)

    def test_failure_aborts_remaining_tasks(self):
        """Test that the first install failure stops the stage."""
        installer = RecordingInstaller(fail_on="x")
        stage = InstallationStage(self.config, installer=installer)

        with self.assertRaises(InstallFailure):
            stage.execute(self.state)

        self.assertNotIn(("editable", "z"), installer.calls)

    def test_post_install_packages(self):
        """Test that helper packages are installed last."""
        self.config.installation.post_install_packages = ["ipython"]
        installer = RecordingInstaller()

        InstallationStage(self.config, installer=installer).execute(self.state)

        self.assertEqual(installer.calls[-1], ("packages", ("ipython",)))


if __name__ == "__main__":
    unittest.main()
