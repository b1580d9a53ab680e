from __future__ import annotations

import base64
import tempfile
import unittest

from filemanager.entries import FileEntry
from filemanager.errors import InvalidRequest, NotFound
from filemanager.paths import normalize_root
from filemanager.transfer import ArchiveManifest, SingleFilePayload, TransferAssembler


def ref(path: str, mime_type: str | None = None, is_directory: bool = False) -> FileEntry:
    name = path.rsplit("/", 1)[-1]
    return FileEntry(id="", name=name, path=path, is_directory=is_directory, mime_type=mime_type)


class TransferAssemblerTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = normalize_root(self._tmp.name)
        (self.root / "docs").mkdir()
        (self.root / "docs" / "a.txt").write_bytes(b"alpha")
        (self.root / "b.json").write_bytes(b"{}")
        self.assembler = TransferAssembler(self.root)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_single_file_is_base64_payload(self) -> None:
        payload = self.assembler.prepare([ref("/docs/a.txt")])

        self.assertIsInstance(payload, SingleFilePayload)
        data = payload.to_dict()
        self.assertEqual(data["fileName"], "a.txt")
        self.assertEqual(base64.b64decode(data["buffer"]), b"alpha")
        self.assertEqual(data["size"], 5)
        self.assertEqual(data["mimeType"], "text/plain")

    def test_declared_mime_type_wins(self) -> None:
        payload = self.assembler.prepare([ref("/b.json", mime_type="text/x-custom")])
        self.assertEqual(payload.mime_type, "text/x-custom")

    def test_one_entry_with_archive_flag_is_still_single(self) -> None:
        payload = self.assembler.prepare([ref("/b.json")], as_archive=True)
        self.assertIsInstance(payload, SingleFilePayload)
        self.assertEqual(payload.mime_type, "application/json")

    def test_many_entries_without_archive_is_invalid(self) -> None:
        with self.assertRaises(InvalidRequest):
            self.assembler.prepare([ref("/docs/a.txt"), ref("/b.json")])

    def test_archive_manifest(self) -> None:
        manifest = self.assembler.prepare([ref("/docs/a.txt"), ref("/b.json")], as_archive=True)

        self.assertIsInstance(manifest, ArchiveManifest)
        data = manifest.to_dict()
        self.assertEqual(data["totalFiles"], 2)
        self.assertEqual(
            data["files"],
            [
                {"name": "a.txt", "path": str(self.root / "docs" / "a.txt"), "mimeType": "text/plain"},
                {"name": "b.json", "path": str(self.root / "b.json"), "mimeType": "application/json"},
            ],
        )

    def test_archive_manifest_refuses_escape(self) -> None:
        with self.assertRaises(InvalidRequest):
            self.assembler.prepare([ref("/b.json"), ref("/../../etc/passwd")], as_archive=True)

    def test_no_entries(self) -> None:
        with self.assertRaises(InvalidRequest):
            self.assembler.prepare([])

    def test_missing_file(self) -> None:
        with self.assertRaises(NotFound):
            self.assembler.prepare([ref("/ghost.txt")])

    def test_directory_needs_archive(self) -> None:
        with self.assertRaises(InvalidRequest):
            self.assembler.prepare([ref("/docs", is_directory=True)])

    def test_size_ceiling(self) -> None:
        assembler = TransferAssembler(self.root, max_size=3)
        with self.assertRaises(InvalidRequest):
            assembler.prepare([ref("/docs/a.txt")])


if __name__ == "__main__":
    unittest.main()
