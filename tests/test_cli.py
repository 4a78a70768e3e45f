import json

import pytest  # type: ignore

from sebnf.sebnfc import main


@pytest.fixture
def grammar_file(tmp_path, shapes_src):
    path = tmp_path / "shapes.ebnf"
    path.write_text(shapes_src, encoding="utf-8")
    return path


class TestCheck:
    def test_ok(self, grammar_file, capsys) -> None:
        assert main(["check", str(grammar_file)]) == 0
        out = capsys.readouterr().out
        assert "[CHECK OK] productions=11 instances=3 supertypes=2 optionals=1" in out

    def test_extension_can_be_omitted(self, grammar_file, capsys) -> None:
        assert main(["check", str(grammar_file.with_suffix(""))]) == 0
        assert "[CHECK OK]" in capsys.readouterr().out

    def test_debug_goes_to_stderr(self, grammar_file, capsys) -> None:
        assert main(["check", str(grammar_file), "-D"]) == 0
        captured = capsys.readouterr()
        assert "[DEBUG] Grammar ready" in captured.err
        assert "[MODEL]" in captured.err
        assert "[DEBUG]" not in captured.out

    def test_syntax_error(self, tmp_path, capsys) -> None:
        path = tmp_path / "bad.ebnf"
        path.write_text("a = A\n", encoding="utf-8")
        assert main(["check", str(path), "--no-attributes"]) == 2
        assert "[SYNTAX ERROR]" in capsys.readouterr().err

    def test_resolve_error(self, tmp_path, capsys) -> None:
        path = tmp_path / "bad.ebnf"
        path.write_text("a = A, missing ;\n", encoding="utf-8")
        assert main(["check", str(path), "--no-attributes"]) == 2
        assert "[ERROR] UndefinedReference" in capsys.readouterr().err

    def test_missing_attribute_block(self, tmp_path, capsys) -> None:
        path = tmp_path / "plain.ebnf"
        path.write_text("a = A ;\n", encoding="utf-8")
        assert main(["check", str(path)]) == 2
        assert main(["check", str(path), "--no-attributes"]) == 0

    def test_long_absent_marker(self, grammar_file, capsys) -> None:
        assert main(["check", str(grammar_file), "--absent-marker", "NONE"]) == 2
        assert "[ERROR] ValueError ResolveOptions.absent_marker" in capsys.readouterr().err


class TestModel:
    def test_lines(self, grammar_file, capsys) -> None:
        assert main(["model", str(grammar_file)]) == 0
        lines = capsys.readouterr().out.splitlines()
        circle = next(l for l in lines if l.startswith("circle "))
        assert "instance" in circle
        assert "ancestors=[shape]" in circle
        assert "attributes=[name, center, radius]" in circle
        assert any(l.startswith("optLabel ") and "optional=wraps_other->label" in l for l in lines)

    def test_json(self, grammar_file, capsys) -> None:
        assert main(["model", str(grammar_file), "--json"]) == 0
        snap = json.loads(capsys.readouterr().out)
        assert snap["productions"]["shape"]["instance_witness"] == "circle"


class TestBuild:
    def test_writes_four_files(self, grammar_file, tmp_path, capsys) -> None:
        out_dir = tmp_path / "out"
        assert main(["build", str(grammar_file), "-o", str(out_dir)]) == 0
        for name in ("shapesclasses.hh", "shapesclasses.cc", "shapes.y", "shapes.lex"):
            assert (out_dir / name).is_file()
        assert capsys.readouterr().out.count("[EMIT]") == 4
        assert "#include <list>" in (out_dir / "shapesclasses.hh").read_text(encoding="utf-8")
        assert "void circle::printSelf()" in (out_dir / "shapesclasses.cc").read_text(encoding="utf-8")
        assert "void linkAll()" in (out_dir / "shapes.y").read_text(encoding="utf-8")

    def test_base_name(self, grammar_file, tmp_path) -> None:
        out_dir = tmp_path / "out"
        assert main(["build", str(grammar_file), "-o", str(out_dir), "-b", "geo"]) == 0
        assert (out_dir / "geoclasses.hh").is_file()
        assert '#include "geoclasses.hh"' in (out_dir / "geo.lex").read_text(encoding="utf-8")

    def test_emit_error(self, tmp_path, capsys) -> None:
        path = tmp_path / "list.ebnf"
        path.write_text("xs = x | xs, x ;\nx = X ;\n", encoding="utf-8")
        assert main(["build", str(path), "-o", str(tmp_path / "out"), "--no-attributes"]) == 2
        assert "[ERROR] ValueError emit_yacc" in capsys.readouterr().err
