from pathlib import Path
import pytest
from thesaurus.config import Options
from thesaurus.DB.writer import ArchiveWriter
from thesaurus.engine import Session
from thesaurus_web.web import app as flask_app

def _seed(tmp: Path) -> str:
    root = tmp / "dicts"; root.mkdir()
    (ArchiveWriter(str(root), "animals", bookname="Animals")
        .add("cat", "a small domesticated feline")
        .add("dog", "a domesticated <b>canine</b>")
        .add("doge", "a Venetian magistrate")
        .save())
    return str(root)

def _session(tmp: Path) -> Session:
    root = _seed(tmp)
    return Session.open([("animals", root), ("ghost", root)], Options(width=40))

@pytest.mark.e2e
def test_frontend_search_and_scroll(tmp_path: Path):
    import thesaurus_web.web as webmod
    webmod._session = _session(tmp_path)
    try:
        client = flask_app.test_client()
        r = client.get("/api/search?q=dog&lines=5")
        assert r.status_code == 200
        data = r.get_json()
        assert data["dict"] == "animals" and data["match"] is True
        assert len(data["lines"]) == 5
        assert data["start"] == [0, 0] and data["end"] == [0, 5]

        data = client.get("/api/scroll?count=5").get_json()
        assert "canine" in data["lines"][0]
        spans = client.get("/api/find?term=canine").get_json()["spans"]
        assert spans and spans[0][0] == 0

        back = client.get("/api/scroll?count=-5").get_json()
        assert back["start"] == [0, 0]
        again = client.get("/api/repeat?lines=5").get_json()
        assert again["lines"] == back["lines"]

        nxt = client.get("/api/entry?delta=1&lines=5").get_json()
        assert any("doge" in ln for ln in nxt["lines"])

        miss = client.get("/api/search?q=qqq").get_json()
        assert miss["match"] is False and miss["lines"] == []
    finally:
        webmod._session.close()
        webmod._session = None

@pytest.mark.e2e
def test_frontend_mode_and_dicts(tmp_path: Path):
    import thesaurus_web.web as webmod
    webmod._session = _session(tmp_path)
    try:
        client = flask_app.test_client()
        client.get("/api/search?q=dog&lines=5")
        r = client.post("/api/mode", json={"strict": True, "lines": 3})
        data = r.get_json()
        assert data["options"]["strict"] is True
        assert data["lines"][0] == "-" * 40
        # the title block is not split across pages
        assert len(data["lines"]) == 5

        dicts = client.get("/api/dicts").get_json()
        assert [d["name"] for d in dicts["dictionaries"]] == ["animals"]
        assert dicts["dictionaries"][0]["title"] == "Animals"
        assert dicts["dictionaries"][0]["entries"] == 3
        assert "ghost" in dicts["failures"]

        assert client.get("/api/search?dict=nope&q=dog").status_code == 404
    finally:
        webmod._session.close()
        webmod._session = None

@pytest.mark.e2e
def test_frontend_health_and_home(tmp_path: Path):
    import thesaurus_web.web as webmod
    client = flask_app.test_client()
    assert client.get("/api/health").get_json() == {"ok": False, "dictionaries": 0}
    assert client.get("/api/scroll").status_code == 404

    webmod._session = _session(tmp_path)
    try:
        assert client.get("/api/health").get_json() == {"ok": True, "dictionaries": 1}
        r = client.get("/")
        assert r.status_code == 200
        html = r.data.decode("utf-8", errors="ignore").lower()
        assert "<title>thesaurus</title>" in html
    finally:
        webmod._session.close()
        webmod._session = None
