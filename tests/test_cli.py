"""
End-to-end tests for the icsctl command line, with the controller wired to
the in-memory sharing fakes.
"""

import contextlib
import io
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from fake_sharing import make_environment
from icsctl import config
from icsctl.__main__ import build_parser, main
from icsctl.controller.main_controller import SharingController
from icsctl.exceptions import PrivilegeRequiredError


class CliTestCase(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        env = patch.dict(os.environ, {}, clear=False)
        env.start()
        self.addCleanup(env.stop)
        os.environ.pop(config.CONFIG_ENV_VAR, None)
        default = patch.object(config, "DEFAULT_CONFIG_PATH", Path(self.tmp.name) / "missing.conf")
        default.start()
        self.addCleanup(default.stop)

        self.share, self.wmi = make_environment()
        self.controller = SharingController(self.share, self.wmi, privilege_check=lambda: None)

    def run_cli(self, *argv, controller=None):
        stdout, stderr = io.StringIO(), io.StringIO()
        with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
            code = main(list(argv), controller or self.controller)
        return code, stdout.getvalue(), stderr.getvalue()


class TestParser(unittest.TestCase):
    def test_set_sharing_requires_both_names(self):
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                build_parser().parse_args(["set-sharing", "--public", "Wi-Fi"])
        self.assertEqual(ctx.exception.code, 2)

    def test_all_and_enabled_only_are_exclusive(self):
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                build_parser().parse_args(["get-status", "--all", "--enabled-only"])

    def test_get_status_defaults(self):
        args = build_parser().parse_args(["get-status"])
        self.assertIsNone(args.scope)
        self.assertIsNone(args.strict)
        self.assertIsNone(args.names)


class TestCommands(CliTestCase):
    def test_set_sharing(self):
        code, out, _ = self.run_cli("set-sharing", "--public", "Wi-Fi", "--private", "Ethernet")
        self.assertEqual(code, 0)
        self.assertIn("Sharing enabled", out)
        self.assertEqual(self.share.state_of("Wi-Fi"), "public")
        self.assertEqual(self.share.state_of("Ethernet"), "private")

    def test_set_sharing_twice_reports_already_set(self):
        self.run_cli("set-sharing", "--public", "Wi-Fi", "--private", "Ethernet")
        self.share.calls.clear()
        code, out, _ = self.run_cli("set-sharing", "--public", "Wi-Fi", "--private", "Ethernet")
        self.assertEqual(code, 0)
        self.assertIn("already set", out)
        self.assertEqual(self.share.calls, [])

    def test_set_sharing_pass_through(self):
        code, out, _ = self.run_cli("set-sharing", "--public", "Wi-Fi", "--private", "Ethernet", "--pass-through")
        self.assertEqual(code, 0)
        self.assertIn("Public", out)
        self.assertIn("Private", out)

    def test_set_sharing_same_connection(self):
        code, _, err = self.run_cli("set-sharing", "--public", "Wi-Fi", "--private", "Wi-Fi")
        self.assertEqual(code, 1)
        self.assertIn("Wi-Fi", err)
        self.assertEqual(self.share.calls, [])

    def test_private_not_up(self):
        code, _, err = self.run_cli("set-sharing", "--public", "Wi-Fi", "--private", "Ethernet 2")
        self.assertEqual(code, 1)
        self.assertIn("Ethernet 2", err)

    def test_dry_run(self):
        code, _, err = self.run_cli("set-sharing", "--public", "Wi-Fi", "--private", "Ethernet", "--dry-run")
        self.assertEqual(code, 0)
        self.assertIn("What if", err)
        self.assertEqual(self.share.calls, [])

    def test_get_status_enabled_only(self):
        self.run_cli("set-sharing", "--public", "Wi-Fi", "--private", "Ethernet")
        code, out, _ = self.run_cli("get-status", "--enabled-only")
        self.assertEqual(code, 0)
        self.assertIn("Wi-Fi", out)
        self.assertNotIn("VPN Tunnel", out)

    def test_get_status_unknown_name(self):
        code, _, err = self.run_cli("get-status", "--names", "Token Ring")
        self.assertEqual(code, 1)
        self.assertIn("Token Ring", err)

    def test_get_status_no_strict(self):
        code, out, _ = self.run_cli("get-status", "--names", "Token Ring", "Wi-Fi", "--no-strict")
        self.assertEqual(code, 0)
        self.assertIn("Wi-Fi", out)

    def test_disable_sharing(self):
        self.run_cli("set-sharing", "--public", "Wi-Fi", "--private", "Ethernet")
        code, out, _ = self.run_cli("disable-sharing", "--pass-through")
        self.assertEqual(code, 0)
        self.assertIn("Sharing disabled on: Wi-Fi, Ethernet", out)
        self.assertIsNone(self.share.state_of("Wi-Fi"))

    def test_disable_sharing_when_nothing_enabled(self):
        code, out, _ = self.run_cli("disable-sharing")
        self.assertEqual(code, 0)
        self.assertEqual(out, "")
        self.assertEqual(self.share.calls, [])

    def test_missing_privilege(self):
        def deny():
            raise PrivilegeRequiredError("Administrator privileges are required")

        controller = SharingController(self.share, self.wmi, privilege_check=deny)
        code, _, err = self.run_cli("get-status", controller=controller)
        self.assertEqual(code, 1)
        self.assertIn("Administrator privileges", err)

    def test_bad_config_file(self):
        code, _, err = self.run_cli("--config", str(Path(self.tmp.name) / "nope.conf"), "get-status")
        self.assertEqual(code, 1)
        self.assertIn("does not exist", err)

    def test_set_sharing_reports_resolved_names(self):
        code, out, _ = self.run_cli("set-sharing", "--public", "Wi*", "--private", "ethernet")
        self.assertEqual(code, 0)
        self.assertIn("Sharing enabled: 'Wi-Fi' (public) -> 'Ethernet' (private)", out)

    def test_get_status_names_enabled_only(self):
        self.run_cli("set-sharing", "--public", "Wi-Fi", "--private", "Ethernet")
        code, out, _ = self.run_cli("get-status", "--names", "Eth*", "--enabled-only")
        self.assertEqual(code, 0)
        self.assertIn("Ethernet", out)
        self.assertNotIn("Ethernet 2", out)

    def test_unwritable_log_file(self):
        blocker = Path(self.tmp.name) / "afile"
        blocker.write_text("", encoding="utf-8")
        code, _, err = self.run_cli("--log-file", str(blocker / "sub" / "icsctl.log"), "get-status")
        self.assertEqual(code, 1)
        self.assertIn("Cannot open log file", err)
        self.assertEqual(self.share.calls, [])

    def test_invalid_log_level_in_config(self):
        path = Path(self.tmp.name) / "icsctl.conf"
        path.write_text("[logging]\nlevel = verbose\n", encoding="utf-8")
        code, _, err = self.run_cli("--config", str(path), "get-status")
        self.assertEqual(code, 1)
        self.assertIn("[logging] level", err)

    def test_sort_from_config(self):
        path = Path(self.tmp.name) / "icsctl.conf"
        path.write_text("[status]\nsort = state\n", encoding="utf-8")
        self.run_cli("set-sharing", "--public", "Wi-Fi", "--private", "Ethernet")
        code, out, _ = self.run_cli("--config", str(path), "get-status")
        self.assertEqual(code, 0)
        rows = out.splitlines()[2:]
        self.assertTrue(rows[0].startswith("Wi-Fi"))
        self.assertTrue(rows[1].startswith("Ethernet"))


if __name__ == "__main__":
    unittest.main()
