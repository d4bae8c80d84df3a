import unittest
from pathlib import Path

from core import paths as core_paths


class CorePathsTests(unittest.TestCase):
    def test_desktop_uses_userprofile_on_windows(self) -> None:
        env = {"USERPROFILE": r"C:\Users\dev", "HOME": "/home/dev"}
        desktop = core_paths.resolve_desktop_dir({}, env=env, platform="win32")
        self.assertEqual(desktop, Path(r"C:\Users\dev") / "Desktop")

    def test_desktop_uses_home_elsewhere(self) -> None:
        env = {"USERPROFILE": r"C:\Users\dev", "HOME": "/home/dev"}
        desktop = core_paths.resolve_desktop_dir({}, env=env, platform="linux")
        self.assertEqual(desktop, Path("/home/dev") / "Desktop")

    def test_desktop_falls_back_to_home_on_windows_without_profile(self) -> None:
        desktop = core_paths.resolve_desktop_dir({}, env={"HOME": "/home/dev"}, platform="win32")
        self.assertEqual(desktop, Path("/home/dev") / "Desktop")

    def test_desktop_unresolvable(self) -> None:
        self.assertIsNone(core_paths.resolve_desktop_dir({}, env={}, platform="linux"))

    def test_desktop_setting_overrides_environment(self) -> None:
        desktop = core_paths.resolve_desktop_dir(
            {"desktop_dir": "/mnt/share/drop"}, env={"HOME": "/home/dev"}, platform="linux"
        )
        self.assertEqual(desktop, Path("/mnt/share/drop").resolve())

    def test_settings_search_order(self) -> None:
        base = Path("/projects")
        found = core_paths.get_default_settings_paths(base, env={"VITEBACKUP_HOME": "/opt/vb"})
        self.assertEqual(found[0], base / ".vitebackup.json")
        self.assertEqual(found[1], Path("/opt/vb").resolve() / "settings.json")

    def test_log_path_from_settings(self) -> None:
        base = Path("/projects")
        self.assertEqual(core_paths.get_log_path(base, {}), base / "backup_log.txt")
        self.assertEqual(
            core_paths.get_log_path(base, {"log": {"file_name": "run.txt"}}), base / "run.txt"
        )


if __name__ == "__main__":
    unittest.main()
