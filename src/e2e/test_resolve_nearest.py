import pytest
from thesaurus.DB.catalog import IndexCatalog
from thesaurus.models import Entry
from thesaurus.search import ResolveOptions, resolve

def _catalog(*lemmas: str) -> IndexCatalog:
    return IndexCatalog([Entry(i, lemma, 0, 0) for i, lemma in enumerate(lemmas)])

def _ids(res):
    return [e.id for e in res.matches]

@pytest.mark.e2e
def test_exact_match_beats_nearest():
    res = resolve(_catalog("cat", "dog", "doge", "zeal"), "dog", ResolveOptions())
    assert _ids(res) == [1]
    assert res.nearest is None

@pytest.mark.e2e
def test_nearest_closest_below():
    res = resolve(_catalog("cat", "dog", "doge", "zeal"), "doz", ResolveOptions())
    assert res.matches == []
    assert res.nearest.lemma == "dog"
    assert [e.lemma for e in res.entries] == ["dog"]

@pytest.mark.e2e
def test_no_shared_prefix_means_nothing():
    res = resolve(_catalog("cat", "dog"), "zebra", ResolveOptions())
    assert not res and res.entries == []

@pytest.mark.e2e
def test_homograph_numbers_are_ignored():
    cat = _catalog("bank1", "bank2", "banker", "1984")
    assert _ids(resolve(cat, "bank", ResolveOptions())) == [0, 1]
    assert _ids(resolve(cat, "bank", ResolveOptions(max_matches=1))) == [0]
    assert _ids(resolve(cat, "1984", ResolveOptions())) == [3]

@pytest.mark.e2e
def test_diacritics_and_case():
    cat = _catalog("café", "Dog")
    assert _ids(resolve(cat, "cafe", ResolveOptions())) == [0]
    assert _ids(resolve(cat, "CAFÉ", ResolveOptions(fold_case=True))) == [0]
    off = resolve(cat, "cafe", ResolveOptions(normalize_diacritics=False))
    assert off.matches == [] and off.nearest.lemma == "café"
    assert _ids(resolve(cat, "dog", ResolveOptions())) == []
    assert _ids(resolve(cat, "dog", ResolveOptions(fold_case=True))) == [1]

@pytest.mark.e2e
def test_regex_search_and_invalid_pattern():
    cat = _catalog("cat", "dog", "doge", "do(")
    assert _ids(resolve(cat, "^do", ResolveOptions(as_regex=True))) == [1, 2, 3]
    assert _ids(resolve(cat, "g", ResolveOptions(as_regex=True))) == [1, 2]
    # not a valid pattern: compared literally
    assert _ids(resolve(cat, "do(", ResolveOptions(as_regex=True))) == [3]

@pytest.mark.e2e
def test_nearest_dropped_once_something_matches():
    res = resolve(_catalog("dab", "dog"), "dog", ResolveOptions())
    assert _ids(res) == [1] and res.nearest is None

@pytest.mark.e2e
def test_longer_prefix_wins():
    res = resolve(_catalog("dab", "dom", "dozen"), "doze", ResolveOptions())
    assert res.nearest.lemma == "dozen"

@pytest.mark.e2e
@pytest.mark.parametrize("lemmas, query, expected", [
    (("doa", "dob", "dog"), "doz", "dog"),      # closest below wins
    (("dob", "dozz"), "dom", "dob"),            # candidate above the query is ignored
    (("dox", "dob"), "dom", "dob"),             # nearest above the query is replaced
    (("dog", "dob"), "doz", "dog"),             # farther below does not replace
    (("do", "dog"), "doz", "dog"),              # a bare prefix is replaced
])
def test_tie_break(lemmas, query, expected):
    assert resolve(_catalog(*lemmas), query, ResolveOptions()).nearest.lemma == expected

@pytest.mark.e2e
def test_tie_break_after_combining_marks():
    cat = _catalog("ea", "e\u0301b")
    # stripped: "eb" sits between "ea" and "ez"
    assert resolve(cat, "ez", ResolveOptions()).nearest.id == 1
    # kept: the combining accent sorts above "z"
    assert resolve(cat, "ez", ResolveOptions(normalize_diacritics=False)).nearest.id == 0
