import os
import pytest
from thesaurus import config as CFG
from thesaurus.config import Options, validate_key
from thesaurus.errors import ConfigError

@pytest.mark.e2e
def test_loose_option_names():
    o = Options.from_mapping({"-Width": "50", "STRICT": "yes", "lmargin": 2, "-query-raw": 1})
    assert o.width == 50 and o.strict is True and o.lmargin == 2 and o.query_raw is True
    assert o.entryload == CFG.ENTRYLOAD
    assert validate_key("--Entryload") == "entryload"

@pytest.mark.e2e
@pytest.mark.parametrize("mapping", [
    {"colour": True},
    {"width": "abc"},
    {"width": 10},
    {"entryload": 0},
    {"width": 30, "lmargin": 15, "rmargin": 15},
    {"rmargin": -1},
])
def test_rejected(mapping):
    with pytest.raises(ConfigError):
        Options.from_mapping(mapping)

@pytest.mark.e2e
def test_auto_width(monkeypatch):
    monkeypatch.setattr(CFG.shutil, "get_terminal_size", lambda fallback=(80, 24): os.terminal_size((100, 30)))
    assert Options().width == 100 - CFG.WIDTH_SLACK
    monkeypatch.setattr(CFG.shutil, "get_terminal_size", lambda fallback=(80, 24): os.terminal_size((10, 30)))
    assert Options().width == CFG.MIN_WIDTH

@pytest.mark.e2e
def test_replace_keeps_the_rest():
    o = Options(width=40)
    p = o.replace(regexp=True)
    assert p.regexp is True and p.width == 40 and o.regexp is False
