from pathlib import Path
import pytest
from thesaurus.DB.catalog import IndexCatalog
from thesaurus.DB.corpus import CorpusReader
from thesaurus.DB.writer import ArchiveWriter
from thesaurus.errors import DecodeError, IoError, MissingFile

TEXTS = [
    ("cat", "a small domesticated feline"),
    ("naïve", "lacking experience; <b>ingenuous</b>"),
    ("zeal", "great energy &amp; enthusiasm"),
]

def _seed(tmp: Path) -> str:
    w = ArchiveWriter(str(tmp), "t", bookname="Test")
    for lemma, text in TEXTS:
        w.add(lemma, text)
    return w.save()

@pytest.mark.e2e
def test_read_round_trip_any_order(tmp_path: Path):
    base = _seed(tmp_path)
    cat = IndexCatalog.load(base + ".ifo", base + ".idx", corpus_path=base + ".dict")
    with CorpusReader(base + ".dict") as r:
        for e in reversed(cat.all()):
            assert r.read(e.offset, e.length) == TEXTS[e.id][1]
        # repeatable
        e = cat.get(1)
        assert r.read(e.offset, e.length) == r.read(e.offset, e.length)
        full = r.read_entry(e)
        assert full.corpus == TEXTS[1][1] and full.lemma == "naïve"
        assert r.read_entry(full) is full

@pytest.mark.e2e
def test_short_read_is_io_error(tmp_path: Path):
    base = _seed(tmp_path)
    with CorpusReader(base + ".dict") as r:
        size = r.size()
        with pytest.raises(IoError):
            r.read(size - 1, 5)

@pytest.mark.e2e
def test_invalid_utf8_text(tmp_path: Path):
    p = tmp_path / "bad.dict"
    p.write_bytes(b"ok\xff")
    with CorpusReader(str(p)) as r:
        assert r.read(0, 2) == "ok"
        with pytest.raises(DecodeError) as ei:
            r.read(0, 3)
        assert ei.value.offset == 2

@pytest.mark.e2e
def test_missing_and_closed(tmp_path: Path):
    with pytest.raises(MissingFile):
        CorpusReader(str(tmp_path / "none.dict"))
    base = _seed(tmp_path)
    r = CorpusReader(base + ".dict")
    r.close()
    with pytest.raises(IoError):
        r.read(0, 1)

@pytest.mark.e2e
def test_writer_rejects_nul_lemma(tmp_path: Path):
    w = ArchiveWriter(str(tmp_path), "t")
    with pytest.raises(ValueError):
        w.add("a\0b", "text")

@pytest.mark.e2e
def test_writer_metadata(tmp_path: Path):
    base = _seed(tmp_path)
    text = Path(base + ".ifo").read_text(encoding="utf-8")
    assert text.startswith("StarDict's dict ifo file\n")
    assert "bookname=Test\n" in text and "wordcount=3\n" in text
    assert not list(tmp_path.glob("*.tmp"))
