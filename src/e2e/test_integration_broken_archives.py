from pathlib import Path
import pytest
from thesaurus.DB.writer import ArchiveWriter
from thesaurus.config import Options
from thesaurus.engine import Session
from thesaurus.errors import DecodeError, MalformedIndex, MissingFile
from thesaurus.loader import Dictionary, discover_archives, open_dictionaries

def _seed(tmp: Path) -> str:
    root = tmp / "dicts"; root.mkdir()
    (ArchiveWriter(str(root), "animals", bookname="Animals")
        .add("cat", "a small domesticated feline")
        .add("dog", "a domesticated canine")
        .add("doge", "a Venetian magistrate")
        .save())
    broken = ArchiveWriter(str(root), "broken", bookname="Broken").add("x", "y")
    broken.save()
    Path(broken.path(".idx")).write_bytes(Path(broken.path(".idx")).read_bytes()[:-3])
    return str(root)

def _corrupt(root: str, name: str, lemma: str) -> None:
    # overwrite the first byte of one entry's text with an invalid UTF-8 byte
    d = Dictionary.open(name, root)
    e = next(e for e in d.catalog if e.lemma == lemma)
    d.close()
    p = Path(root) / f"{name}.dict"
    data = bytearray(p.read_bytes())
    data[e.offset] = 0xFF
    p.write_bytes(bytes(data))

@pytest.mark.e2e
def test_one_bad_archive_does_not_sink_the_rest(tmp_path: Path):
    root = _seed(tmp_path)
    specs = discover_archives(root) + [("ghost", root)]
    assert [n for n, _ in specs] == ["animals", "broken", "ghost"]
    s = Session.open(specs, Options(width=40))
    try:
        assert s.ok and s.names() == ["animals"]
        assert set(s.failures) == {"broken", "ghost"}
        assert isinstance(s.failures["broken"], MalformedIndex)
        assert isinstance(s.failures["ghost"], MissingFile)
        assert s.search("dog") is not None
    finally:
        s.close()
    assert not s.ok

@pytest.mark.e2e
def test_duplicate_names_rejected(tmp_path: Path):
    root = _seed(tmp_path)
    with pytest.raises(ValueError):
        open_dictionaries([("animals", root), ("animals", root)])

@pytest.mark.e2e
def test_missing_directory(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        discover_archives(str(tmp_path / "nope"))
    report = open_dictionaries([])
    assert not report.ok

@pytest.mark.e2e
def test_bad_entry_text_is_a_miss(tmp_path: Path):
    root = _seed(tmp_path)
    _corrupt(root, "animals", "dog")
    with Session.open([("animals", root)], Options(width=40)) as s:
        assert s.search("dog") is None
        assert s.search("cat") is not None
        with pytest.raises(DecodeError):
            s.current.dictionary.lookup([1])

@pytest.mark.e2e
def test_bad_neighbour_stops_lazy_load(tmp_path: Path):
    root = _seed(tmp_path)
    _corrupt(root, "animals", "doge")
    with Session.open([("animals", root)], Options(width=40, entryload=1)) as s:
        lines = s.search("dog")
        ctx = s.current
        page = ctx.scroll(100)
        assert page == lines
        assert ctx.scroll(1) is None
        assert ctx.buffer.ids() == [1]

@pytest.mark.e2e
def test_lookup_stops_at_catalog_end(tmp_path: Path):
    root = _seed(tmp_path)
    d = Dictionary.open("animals", root)
    try:
        assert [e.lemma for e in d.lookup([2, 3, 4])] == ["doge"]
        assert [e.lemma for e in d.lookup([-1, 0])] == ["cat"]
        assert d.title == "Animals" and d.info()["wordcount"] == "3"
    finally:
        d.close()

@pytest.mark.e2e
def test_nameless_archive_file_is_skipped(tmp_path: Path):
    root = _seed(tmp_path)
    (Path(root) / ".ifo").write_text("bookname=stray\n", encoding="utf-8")
    assert [n for n, _ in discover_archives(root)] == ["animals", "broken"]
    with Session.open(discover_archives(root), Options(width=40)) as s:
        assert s.names() == ["animals"]

@pytest.mark.e2e
def test_empty_name_is_a_failure_not_an_abort(tmp_path: Path):
    root = _seed(tmp_path)
    report = open_dictionaries([("", root), ("animals", root)])
    assert list(report.dictionaries) == ["animals"]
    assert isinstance(report.failures[""], ValueError)

@pytest.mark.e2e
def test_toggle_rerun_on_bad_text_is_a_miss(tmp_path: Path, caplog):
    root = _seed(tmp_path)
    _corrupt(root, "animals", "doge")
    with Session.open([("animals", root)], Options(width=40)) as s:
        assert s.search("dog") is not None
        ctx = s.current
        assert ctx.set_regexp(True) is not None
        # strict regex also matches doge, whose text cannot be decoded
        with caplog.at_level("WARNING", logger="thesaurus.engine"):
            assert ctx.set_strict(True) is None
        assert ctx.query == "" and ctx.buffer.empty
        assert ctx.options.strict is True
        assert "re-running 'dog' failed" in caplog.text
        assert s.search("cat") is not None
