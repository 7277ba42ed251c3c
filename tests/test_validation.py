"""
Unit tests for input validation helpers.
"""

import unittest

from repobootstrap.utils.validation import (
    parse_extra_dependencies,
    validate_remote,
    validate_repository_name,
)


class TestValidation(unittest.TestCase):
    """Tests for repository name, remote and dependency validation."""

    def test_valid_repository_names(self):
        """Test names that can be used as workspace directories."""
        for name in ("angr", "angr-management", "py_vex", "angr.io"):
            self.assertEqual(validate_repository_name(name), (True, None))

    def test_invalid_repository_names(self):
        """Test names that would escape or break the workspace."""
        for name in ("", ".", "..", "../etc", "org/repo", "bad name", "-rf", "--upload-pack=x"):
            is_valid, error = validate_repository_name(name)
            self.assertFalse(is_valid, name)
            self.assertIsNotNone(error)

    def test_valid_remotes(self):
        """Test the remote forms git understands."""
        for remote in (
            "https://github.com/angr",
            "https://git:@github.com/zardus",
            "git@github.com:angr",
            "ssh://git@example.com/org",
            "file:///srv/mirrors",
            "/srv/mirrors",
        ):
            is_valid, _ = validate_remote(remote)
            self.assertTrue(is_valid, remote)

    def test_invalid_remotes(self):
        """Test rejected remotes."""
        for remote in ("", "github.com/angr", "ftp://example.com/org"):
            is_valid, _ = validate_remote(remote)
            self.assertFalse(is_valid, remote)

    def test_parse_extra_dependencies(self):
        """Test NAME=SPEC parsing with repeated names."""
        mapping = parse_extra_dependencies([
            "pyvex=--pre capstone",
            "angr=sqlalchemy",
            "angr=unicorn==2.0.1.post1",
        ])

        self.assertEqual(mapping, {
            "pyvex": ["--pre", "capstone"],
            "angr": ["sqlalchemy", "unicorn==2.0.1.post1"],
        })

    def test_parse_extra_dependencies_rejects_bare_names(self):
        """Test that entries without '=' are rejected."""
        with self.assertRaises(ValueError):
            parse_extra_dependencies(["capstone"])
        with self.assertRaises(ValueError):
            parse_extra_dependencies(["=capstone"])


if __name__ == "__main__":
    unittest.main()
