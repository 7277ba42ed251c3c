"""
Tests for the command-line interface.
"""

import json
import logging
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from click.testing import CliRunner

from fakes import OK, FakeGitHandler

from repobootstrap.cli import cli
from repobootstrap.core.config import Config


class TestCli(unittest.TestCase):
    """Tests for CLI commands."""

    def setUp(self):
        self.tmpdir = Path(tempfile.mkdtemp())
        self.runner = CliRunner()
        tags = mock.patch("repobootstrap.cli.platform_tags", return_value=("linux", "pypy"))
        self.platform_tags = tags.start()
        self.addCleanup(tags.stop)

    def tearDown(self):
        shutil.rmtree(self.tmpdir)
        logging.getLogger().handlers.clear()
        Config.reset()

    def _invoke(self, *args):
        return self.runner.invoke(cli, list(args), obj={})

    def test_init_writes_config(self):
        """Test that init writes a loadable configuration."""
        output = self.tmpdir / "bootstrap.json"

        result = self._invoke("init", "-o", str(output))

        self.assertEqual(result.exit_code, 0, result.output)
        data = json.loads(output.read_text())
        self.assertIn("acquisition", data)
        self.assertIn("retry", data)

    def test_list_repos(self):
        """Test repository and remote listing."""
        result = self._invoke("list-repos", "-D", "-r", "git@github.com:me", "my-tool")

        self.assertEqual(result.exit_code, 0, result.output)
        lines = [line.strip() for line in result.output.splitlines()]
        self.assertIn("my-tool", lines)
        self.assertNotIn("angr", lines)
        self.assertLess(
            lines.index("git@github.com:me"), lines.index("https://github.com/angr")
        )

    def test_no_defaults_keeps_interpreter_repositories(self):
        """Test that -D drops OS repositories but keeps interpreter ones."""
        self.platform_tags.return_value = ("linux", "cpython")

        result = self._invoke("list-repos", "-D", "my-tool")

        self.assertEqual(result.exit_code, 0, result.output)
        lines = [line.strip() for line in result.output.splitlines()]
        self.assertLess(lines.index("my-tool"), lines.index("angr-management"))
        self.assertNotIn("archr", lines)

    def test_invalid_remote(self):
        """Test that a malformed remote is rejected."""
        result = self._invoke("setup", "-D", "-r", "not a remote", "my-tool")

        self.assertEqual(result.exit_code, 1)
        self.assertIn("Invalid remote base", result.output)

    def test_invalid_extra_dependency(self):
        """Test that --extra-dep requires NAME=SPEC."""
        result = self._invoke(
            "setup", "-D", "-C", "-w", str(self.tmpdir), "--extra-dep", "capstone", "x"
        )

        self.assertEqual(result.exit_code, 1)
        self.assertIn("Expected NAME=SPEC", result.output)

    def test_setup_failure_prints_log(self):
        """Test that a failed clone exits non-zero with the git output."""
        fetcher = FakeGitHandler()
        with mock.patch("repobootstrap.engine.GitHandler", return_value=fetcher):
            result = self._invoke("setup", "-D", "-C", "-w", str(self.tmpdir), "nothing")

        self.assertEqual(result.exit_code, 1)
        self.assertIn("Failed to clone nothing", result.output)
        self.assertIn("fatal: repository not found", result.output)

    def test_setup_clone_only(self):
        """Test a successful clone-only run."""
        fetcher = FakeGitHandler({"https://example.com/org/tool": [OK]})
        with mock.patch("repobootstrap.engine.GitHandler", return_value=fetcher):
            result = self._invoke(
                "setup", "-D", "-C", "-w", str(self.tmpdir),
                "-r", "https://example.com/org", "tool",
            )

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("ALL DONE", result.output)
        self.assertEqual(fetcher.calls, ["https://example.com/org/tool"])
        self.assertTrue((self.tmpdir / "tool").is_dir())

    def test_plan_lists_present_repositories(self):
        """Test the install list preview."""
        (self.tmpdir / "pyvex").mkdir()
        (self.tmpdir / "pyvex" / "setup.py").write_text("")

        result = self._invoke("plan", "-D", "-w", str(self.tmpdir), "pyvex", "cle")

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("pyvex (setup.py)", result.output)
        self.assertIn("Not cloned yet: cle", result.output)


if __name__ == "__main__":
    unittest.main()
