import tempfile
import unittest
from pathlib import Path

from objdet_kit.metadata import load_class_names


class TestLoadClassNames(unittest.TestCase):
    def _write(self, text: str) -> Path:
        tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(tmpdir.cleanup)
        path = Path(tmpdir.name) / "coco.names"
        path.write_text(text, encoding="utf-8")
        return path

    def test_one_name_per_line(self) -> None:
        names = load_class_names(self._write("person\nbicycle\ntraffic light\n"))
        self.assertEqual(names, ["person", "bicycle", "traffic light"])

    def test_last_line_without_newline(self) -> None:
        self.assertEqual(load_class_names(self._write("person\ncar")), ["person", "car"])

    def test_inner_whitespace_kept(self) -> None:
        self.assertEqual(load_class_names(self._write(" dog \n")), [" dog "])

    def test_missing_file_gives_empty_table(self) -> None:
        with self.assertLogs("objdet.metadata", level="WARNING"):
            names = load_class_names("/nonexistent/dir/coco.names")
        self.assertEqual(names, [])


if __name__ == "__main__":
    unittest.main()
