import os
import stat
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from filepwn.lib import filepwn
from filepwn.lib.errors import (DatabaseUnreadable, DirectoryUnreadable,
                                InvalidModeError, MalformedIdentityField,
                                UnknownGroupError, UnknownUserError)
from filepwn.lib.tree_walker import walk_tree


class FilePwnDirectoryTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        base = Path(os.path.realpath(self._tmp.name))
        self.uid = os.getuid()
        self.gid = os.getgid()

        self.passwd_file = base / "passwd"
        self.passwd_file.write_text(
            "root:x:0:0:root:/root:/bin/bash\n"
            f"survey:x:{self.uid}:{self.gid}:Survey Tech:/home/survey:/bin/bash\n",
            encoding="utf-8"
        )
        self.group_file = base / "group"
        self.group_file.write_text(f"root:x:0:\nsurvey:x:{self.gid}:survey\n", encoding="utf-8")

        self.root = base / "root"
        self.root.mkdir()
        (self.root / "a.txt").write_text("a", encoding="utf-8")
        (self.root / "sub").mkdir()
        (self.root / "sub" / "b.txt").write_text("b", encoding="utf-8")
        os.chmod(self.root / "a.txt", 0o600)
        os.chmod(self.root / "sub" / "b.txt", 0o600)
        os.chmod(self.root / "sub", 0o700)

    def tearDown(self):
        self._tmp.cleanup()

    def _mode(self, path):
        return stat.S_IMODE(os.stat(path).st_mode)

    def _run(self, user="survey", group="survey", file_permissions="644", directory_permissions="755", **kwargs):
        kwargs.setdefault("passwd_file", str(self.passwd_file))
        kwargs.setdefault("group_file", str(self.group_file))
        return filepwn.filepwn_directory(str(self.root), user, group, file_permissions, directory_permissions, **kwargs)

    def test_sets_modes_and_ownership(self):
        results = self._run()

        self.assertTrue(results["verdict"])
        self.assertEqual(results["files"], 2)
        self.assertEqual(results["directories"], 1)
        self.assertEqual(results["failures"], [])

        self.assertEqual(self._mode(self.root / "a.txt"), 0o644)
        self.assertEqual(self._mode(self.root / "sub" / "b.txt"), 0o644)
        self.assertEqual(self._mode(self.root / "sub"), 0o755)
        for path in (self.root / "a.txt", self.root / "sub" / "b.txt", self.root / "sub"):
            st = os.stat(path)
            self.assertEqual((st.st_uid, st.st_gid), (self.uid, self.gid))

    def test_root_directory_is_left_alone(self):
        os.chmod(self.root, 0o750)

        self._run()

        self.assertEqual(self._mode(self.root), 0o750)

    def test_invalid_mode_fails_before_any_change(self):
        with mock.patch("filepwn.lib.filepwn.walk_tree") as walker:
            with self.assertRaises(InvalidModeError):
                self._run(file_permissions="999")

        walker.assert_not_called()
        self.assertEqual(self._mode(self.root / "a.txt"), 0o600)

    def test_out_of_range_directory_mode_fails_before_any_change(self):
        with mock.patch("filepwn.lib.filepwn.walk_tree") as walker:
            with self.assertRaises(InvalidModeError):
                self._run(directory_permissions="1755")

        walker.assert_not_called()
        self.assertEqual(self._mode(self.root / "sub"), 0o700)

    def test_unknown_user_fails_before_walk(self):
        with mock.patch("filepwn.lib.filepwn.walk_tree") as walker:
            with self.assertRaises(UnknownUserError):
                self._run(user="nobody")

        walker.assert_not_called()

    def test_unknown_group_fails_before_walk(self):
        with mock.patch("filepwn.lib.filepwn.walk_tree") as walker:
            with self.assertRaises(UnknownGroupError):
                self._run(group="wheel")

        walker.assert_not_called()

    def test_unreadable_database_fails_before_walk(self):
        with mock.patch("filepwn.lib.filepwn.walk_tree") as walker:
            with self.assertRaises(DatabaseUnreadable):
                self._run(group_file=str(self.root / "missing"))

        walker.assert_not_called()

    def test_malformed_database_fails_before_walk(self):
        self.passwd_file.write_text("survey:x:notanumber:0::/:/bin/sh\n", encoding="utf-8")

        with mock.patch("filepwn.lib.filepwn.walk_tree") as walker:
            with self.assertRaises(MalformedIdentityField):
                self._run()

        walker.assert_not_called()

    def test_missing_root_is_fatal(self):
        with self.assertRaises(DirectoryUnreadable):
            filepwn.filepwn_directory(str(self.root / "missing"), "survey", "survey", "644", "755",
                                      passwd_file=str(self.passwd_file), group_file=str(self.group_file))

    def test_file_deleted_after_discovery_is_reported_and_run_continues(self):
        def walk_then_delete(path):
            results = walk_tree(path)
            os.remove(self.root / "a.txt")
            return results

        with mock.patch("filepwn.lib.filepwn.walk_tree", side_effect=walk_then_delete):
            results = self._run()

        self.assertFalse(results["verdict"])
        self.assertEqual(len(results["failures"]), 2)
        self.assertTrue(all(str(self.root / "a.txt") in reason for reason in results["failures"]))
        self.assertIn("2 item(s)", results["reason"])
        self.assertEqual(self._mode(self.root / "sub" / "b.txt"), 0o644)
        self.assertEqual(self._mode(self.root / "sub"), 0o755)

    def test_walk_failures_are_reported(self):
        os.symlink(str(self.root / "missing"), str(self.root / "dangling"))

        results = self._run()

        self.assertFalse(results["verdict"])
        self.assertEqual(len(results["failures"]), 1)
        self.assertIn(str(self.root / "dangling"), results["failures"][0])
        self.assertEqual(self._mode(self.root / "a.txt"), 0o644)


class FilePwnConfigTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.base = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_defaults_for_missing_keys(self):
        config_file = self.base / "filepwn.yaml"
        config_file.write_text("gearmanServer: localhost:4730\n", encoding="utf-8")

        config = filepwn.FilePwn(str(config_file))

        self.assertEqual(config.get_passwd_file(), "/etc/passwd")
        self.assertEqual(config.get_group_file(), "/etc/group")
        self.assertEqual(config.get_file_permissions(), "644")
        self.assertEqual(config.get_directory_permissions(), "755")
        self.assertEqual(config.get_gearman_server(), "localhost:4730")

    def test_shipped_configuration(self):
        config = filepwn.FilePwn()

        self.assertEqual(config.get_passwd_file(), "/etc/passwd")
        self.assertEqual(config.get_group_file(), "/etc/group")

    def test_configured_databases_and_permissions_are_used(self):
        config_file = self.base / "filepwn.yaml"
        config_file.write_text(
            "passwdFile: /srv/fixtures/passwd\n"
            "groupFile: /srv/fixtures/group\n"
            "filePermissions: '640'\n"
            "directoryPermissions: '750'\n",
            encoding="utf-8"
        )
        config = filepwn.FilePwn(str(config_file))

        with mock.patch("filepwn.lib.filepwn.filepwn_directory", return_value={"verdict": True}) as run:
            config.filepwn_directory("/data", "survey", "survey")

        run.assert_called_once_with("/data", "survey", "survey", "640", "750",
                                    passwd_file="/srv/fixtures/passwd", group_file="/srv/fixtures/group")

    def test_explicit_permissions_override_configuration(self):
        config_file = self.base / "filepwn.yaml"
        config_file.write_text("filePermissions: '640'\n", encoding="utf-8")
        config = filepwn.FilePwn(str(config_file))

        with mock.patch("filepwn.lib.filepwn.filepwn_directory", return_value={"verdict": True}) as run:
            config.filepwn_directory("/data", "survey", "survey", "600", "700")

        self.assertEqual(run.call_args[0][3:], ("600", "700"))

    def test_unquoted_octal_permissions_are_rejected_before_any_change(self):
        root = Path(os.path.realpath(self._tmp.name)) / "root"
        root.mkdir()
        (root / "a.txt").write_text("a", encoding="utf-8")
        os.chmod(root / "a.txt", 0o600)
        passwd_file = self.base / "passwd"
        passwd_file.write_text(f"survey:x:{os.getuid()}:{os.getgid()}::/:/bin/sh\n", encoding="utf-8")
        group_file = self.base / "group"
        group_file.write_text(f"survey:x:{os.getgid()}:\n", encoding="utf-8")
        config_file = self.base / "filepwn.yaml"
        config_file.write_text(
            f"passwdFile: {passwd_file}\n"
            f"groupFile: {group_file}\n"
            "filePermissions: 0644\n",
            encoding="utf-8"
        )
        config = filepwn.FilePwn(str(config_file))

        with mock.patch("filepwn.lib.filepwn.walk_tree") as walker:
            with self.assertRaises(InvalidModeError) as ctx:
                config.filepwn_directory(str(root), "survey", "survey", None, "755")

        walker.assert_not_called()
        self.assertIn("quoted", str(ctx.exception))
        self.assertEqual(self._mode(root / "a.txt"), 0o600)

    def test_unquoted_directory_permissions_are_rejected(self):
        config_file = self.base / "filepwn.yaml"
        config_file.write_text("directoryPermissions: 755\n", encoding="utf-8")
        config = filepwn.FilePwn(str(config_file))

        with self.assertRaises(InvalidModeError):
            config.get_directory_permissions()

    def _mode(self, path):
        return stat.S_IMODE(os.stat(path).st_mode)


if __name__ == "__main__":
    unittest.main()
