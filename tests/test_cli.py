"""Tests for cli/app.py — argument handling and output."""

from __future__ import annotations

import json

import pytest

from cli.app import build_parser, main


@pytest.fixture
def deck_file(tmp_path, single_slide_doc):
    path = tmp_path / "deck.json"
    path.write_text(json.dumps(single_slide_doc), encoding="utf-8")
    return path


RAW = 'Done: {"ops": [{"op": "set_text", "slideId": "s1", "objectId": "e1", "text": "new"}]}'


class TestCli:

    def test_parser_requires_input_and_document(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--document", "deck.json"])
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--text", "{}"])

    def test_allow_is_repeatable(self):
        args = build_parser().parse_args(
            ["-t", "{}", "-d", "deck.json", "--allow", "1:title", "--allow", "2:body"]
        )
        assert args.allow == ["1:title", "2:body"]

    def test_prints_next_state(self, deck_file, capsys):
        main(["--text", RAW, "--document", str(deck_file)])
        out = json.loads(capsys.readouterr().out)
        assert out["slides"][0]["objects"][0]["text"] == "new"

    def test_locks_file_respected(self, deck_file, tmp_path, capsys):
        locks = tmp_path / "locks.json"
        locks.write_text(json.dumps({"s1.e1": True}), encoding="utf-8")
        main(["--text", RAW, "--document", str(deck_file), "--locks", str(locks)])
        out = json.loads(capsys.readouterr().out)
        assert out["slides"][0]["objects"][0]["text"] == "old"

    def test_output_file(self, deck_file, tmp_path):
        raw_file = tmp_path / "reply.txt"
        raw_file.write_text(RAW, encoding="utf-8")
        target = tmp_path / "next.json"
        main(["-f", str(raw_file), "-d", str(deck_file), "-o", str(target), "-q", "-p"])
        saved = json.loads(target.read_text(encoding="utf-8"))
        assert saved["slides"][0]["objects"][0]["text"] == "new"

    def test_rejected_patch_exits(self, deck_file, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--text", '{"ops": []}', "--document", str(deck_file)])
        assert exc_info.value.code == 1
        assert "edit contract" in capsys.readouterr().err

    def test_missing_document_exits(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--text", RAW, "--document", str(tmp_path / "nope.json")])
        assert exc_info.value.code == 1
        assert "not found" in capsys.readouterr().err
