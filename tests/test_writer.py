from __future__ import annotations

import json
from pathlib import Path

import pytest

from calaccess_lobbyists.models import LobbyistRecord
from calaccess_lobbyists.writer import output_path, render_records, sort_records, write_records


def _records() -> list[LobbyistRecord]:
    return [
        LobbyistRecord(id="300", name="SMITH, PAT"),
        LobbyistRecord(id="200", name="ADAMS, LEE", status="ACTIVE"),
        LobbyistRecord(id="100", name="SMITH, PAT"),
        LobbyistRecord(id="400", name="adams, lee"),
        LobbyistRecord(id="050", name="ÁLVAREZ, SOFÍA"),
    ]


class TestSortRecords:
    def test_name_then_id(self) -> None:
        ordered = [(r.name, r.id) for r in sort_records(_records())]
        assert ordered == [
            ("ADAMS, LEE", "200"),
            ("SMITH, PAT", "100"),
            ("SMITH, PAT", "300"),
            ("adams, lee", "400"),
            ("ÁLVAREZ, SOFÍA", "050"),
        ]

    def test_ids_compare_as_strings(self) -> None:
        records = [LobbyistRecord(id="10", name="A"), LobbyistRecord(id="9", name="A")]
        assert [r.id for r in sort_records(records)] == ["10", "9"]


class TestOutputPath:
    def test_named_by_session(self, tmp_path: Path) -> None:
        assert output_path(2023, tmp_path) == tmp_path / "lobbyists-2023.json"
        assert output_path(2019, tmp_path).name == "lobbyists-2019.json"


class TestWriteRecords:
    def test_writes_sorted_json(self, tmp_path: Path) -> None:
        path = write_records(_records(), 2023, tmp_path)
        data = json.loads(path.read_text(encoding="utf-8"))
        assert [d["id"] for d in data] == ["200", "100", "300", "400", "050"]
        assert data[0] == {
            "id": "200",
            "name": "ADAMS, LEE",
            "status": "ACTIVE",
            "relationships": [],
        }

    def test_two_space_indent_no_trailing_newline(self, tmp_path: Path) -> None:
        path = write_records([LobbyistRecord(id="1", name="A")], 2023, tmp_path)
        text = path.read_text(encoding="utf-8")
        assert text.startswith('[\n  {\n    "id": "1",')
        assert not text.endswith("\n")

    def test_non_ascii_written_as_utf8(self, tmp_path: Path) -> None:
        path = write_records(_records(), 2023, tmp_path)
        assert "ÁLVAREZ, SOFÍA" in path.read_text(encoding="utf-8")

    def test_rerun_is_byte_identical(self, tmp_path: Path) -> None:
        first = write_records(_records(), 2023, tmp_path).read_bytes()
        second = write_records(list(reversed(_records())), 2023, tmp_path).read_bytes()
        assert first == second

    def test_replaces_existing_file(self, tmp_path: Path) -> None:
        write_records(_records(), 2023, tmp_path)
        path = write_records([LobbyistRecord(id="1", name="A")], 2023, tmp_path)
        assert len(json.loads(path.read_text(encoding="utf-8"))) == 1
        assert not path.with_suffix(".json.tmp").exists()

    def test_creates_output_dir(self, tmp_path: Path) -> None:
        path = write_records(_records(), 2023, tmp_path / "out" / "nested")
        assert path.exists()

    def test_failed_write_leaves_no_tmp_file(self, tmp_path: Path) -> None:
        # A directory in the way makes the final rename fail.
        blocker = output_path(2023, tmp_path)
        blocker.mkdir()
        (blocker / "keep").write_text("x", encoding="utf-8")
        with pytest.raises(OSError):
            write_records(_records(), 2023, tmp_path)
        assert not blocker.with_suffix(".json.tmp").exists()
        assert blocker.is_dir()


class TestRenderRecords:
    def test_empty_list(self) -> None:
        assert render_records([]) == "[]"
