from pathlib import Path
import builtins
import pytest
from thesaurus.DB.writer import ArchiveWriter
from thesaurus.__main__ import highlight, main, render_markup

def _seed(tmp: Path) -> str:
    root = tmp / "dicts"; root.mkdir()
    (ArchiveWriter(str(root), "animals", bookname="Animals")
        .add("cat", "a small domesticated feline")
        .add("dog", "a domesticated <b>canine</b>")
        .add("doge", "a Venetian magistrate")
        .save())
    return str(root)

@pytest.mark.e2e
def test_one_shot_query(tmp_path: Path, capsys):
    root = _seed(tmp_path)
    rc = main(["--dict", f"animals={root}", "-q", "dog", "--width", "40", "--lines", "6"])
    out = capsys.readouterr().out
    assert rc == 0
    assert "canine" in out and "<b>" not in out and "<t>" not in out
    assert len(out.splitlines()) == 6

@pytest.mark.e2e
def test_one_shot_no_match(tmp_path: Path, capsys):
    root = _seed(tmp_path)
    assert main(["--dir", root, "-q", "qqq", "--width", "40"]) == 0
    assert "(no match)" in capsys.readouterr().out

@pytest.mark.e2e
def test_nothing_loaded(tmp_path: Path, capsys):
    assert main(["--dict", f"ghost={tmp_path}", "-q", "dog"]) == 1
    assert "ghost" in capsys.readouterr().err

@pytest.mark.e2e
def test_bad_arguments(tmp_path: Path):
    with pytest.raises(SystemExit):
        main([])
    with pytest.raises(SystemExit):
        main(["--dict", f"a={tmp_path}", "--lines", "0"])
    with pytest.raises(SystemExit):
        main(["--dict", "no-equals-sign"])
    with pytest.raises(SystemExit):
        main(["--dict", f"a={tmp_path}", "--width", "5"])

@pytest.mark.e2e
def test_repl_session(tmp_path: Path, monkeypatch, capsys):
    root = _seed(tmp_path)
    commands = iter(["dog", ":n", "/canine", ":dicts", ":strict", ""])
    monkeypatch.setattr(builtins, "input", lambda prompt="": next(commands))
    assert main(["--dict", f"animals={root}", "--width", "40", "--lines", "5"]) == 0
    out = capsys.readouterr().out
    assert "[canine]" in out
    assert "* animals" in out
    assert "(strict on)" in out
    assert "Goodbye!" in out

@pytest.mark.e2e
def test_markup_helpers():
    assert render_markup("<t>dog</t>, <b>x</b>", color=False) == "dog, x"
    assert render_markup("<t>dog</t>", color=True) == "\033[1;33mdog\033[0m"
    assert highlight(["a <b>cat</b> sat"], [(0, 2, 5)], color=False) == ["a [cat] sat"]

@pytest.mark.e2e
def test_highlight_after_font_tag():
    from thesaurus.search import search_lines
    lines = ['<font color="red">x</font> cat']
    assert highlight(lines, search_lines(lines, "cat"), color=False) == ["x [cat]"]
