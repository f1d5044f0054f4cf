import io
import tempfile
import unittest
import zipfile
from pathlib import Path

from clawget.skill_package import SkillPackageError, install_package, package_skill


def _zip(entries: dict[str, bytes]) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name, data in entries.items():
            zf.writestr(name, data)
    return buf.getvalue()


class TestPackageSkill(unittest.TestCase):
    def test_package_contains_relative_names_and_skips_junk(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            root = Path(td) / "web_scraper"
            (root / "lib").mkdir(parents=True)
            (root / "__pycache__").mkdir()
            (root / "SKILL.md").write_text("# Scraper\n", encoding="utf-8")
            (root / "lib" / "fetch.py").write_text("print('ok')\n", encoding="utf-8")
            (root / "__pycache__" / "x.pyc").write_bytes(b"\0")

            pkg = package_skill(root)

            with zipfile.ZipFile(io.BytesIO(pkg.zip_bytes), "r") as zf:
                names = sorted(zf.namelist())

        self.assertEqual(names, ["SKILL.md", "lib/fetch.py"])
        self.assertEqual(pkg.file_count, 2)
        self.assertEqual(pkg.filename, "web_scraper.zip")
        self.assertEqual(len(pkg.sha256), 64)
        self.assertEqual(pkg.warnings, [])

    def test_package_requires_skill_md(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            with self.assertRaises(SkillPackageError):
                package_skill(Path(td))

    def test_oversized_package_is_a_warning(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            root = Path(td)
            (root / "SKILL.md").write_text("# Big\n" * 100, encoding="utf-8")
            pkg = package_skill(root, max_upload_bytes=10)
        self.assertEqual(len(pkg.warnings), 1)


class TestInstallPackage(unittest.TestCase):
    def test_single_top_level_folder_is_flattened(self) -> None:
        data = _zip({"scraper/SKILL.md": b"# S\n", "scraper/run.py": b"pass\n"})
        with tempfile.TemporaryDirectory() as td:
            dest = Path(td) / "skills" / "scraper"
            install_package(data, dest)
            self.assertEqual(sorted(p.name for p in dest.iterdir()), ["SKILL.md", "run.py"])

    def test_flat_archive_is_installed_as_is(self) -> None:
        data = _zip({"SKILL.md": b"# S\n", "docs/readme.txt": b"hi"})
        with tempfile.TemporaryDirectory() as td:
            dest = Path(td) / "s"
            install_package(data, dest)
            self.assertTrue((dest / "docs" / "readme.txt").is_file())

    def test_existing_destination_is_refused(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            with self.assertRaises(FileExistsError):
                install_package(_zip({"SKILL.md": b""}), Path(td))

    def test_path_traversal_is_rejected(self) -> None:
        data = _zip({"../evil.txt": b"x"})
        with tempfile.TemporaryDirectory() as td:
            dest = Path(td) / "inner" / "s"
            with self.assertRaises(SkillPackageError):
                install_package(data, dest)
            self.assertFalse((Path(td) / "inner" / "evil.txt").exists())
            self.assertFalse(dest.exists())

    def test_garbage_bytes_are_a_package_error(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            with self.assertRaises(SkillPackageError):
                install_package(b"not a zip", Path(td) / "s")


if __name__ == "__main__":
    unittest.main()
