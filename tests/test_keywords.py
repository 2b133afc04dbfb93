import pytest

from services import keywords
from services.errors import InvalidInputError
from helpers import make_material, make_user


def test_frequencies_count_each_keyword(db, reader):
    make_material(db, reader, 'Numbers', keywords=['math', 'algebra'])
    make_material(db, reader, 'Equations', keywords=['algebra'])

    counts = [(k.word, k.count) for k in keywords.keyword_frequencies(db)]

    assert ('math', 1) in counts
    assert ('algebra', 2) in counts
    assert len(counts) == 2


def test_frequencies_most_used_first_then_first_seen(db, reader):
    make_material(db, reader, 'A', keywords=['history', 'art', 'music'])
    make_material(db, reader, 'B', keywords=['music', 'art'])
    make_material(db, reader, 'C', keywords=['music'])

    counts = [(k.word, k.count) for k in keywords.keyword_frequencies(db)]

    assert counts == [('music', 3), ('art', 2), ('history', 1)]


def test_frequencies_empty_catalog(db):
    assert keywords.keyword_frequencies(db) == []


def test_frequencies_skip_materials_hidden_from_viewer(db, reader, admin):
    stranger = make_user(db, 'stranger')
    make_material(db, stranger, 'Public', keywords=['algebra'])
    make_material(db, stranger, 'Pending', keywords=['algebra', 'secret'], approved=False)
    make_material(db, reader, 'Mine Pending', keywords=['draft'], approved=False)

    for_reader = [(k.word, k.count) for k in keywords.keyword_frequencies(db, reader)]
    for_admin = [(k.word, k.count) for k in keywords.keyword_frequencies(db, admin)]

    assert for_reader == [('algebra', 1), ('draft', 1)]
    assert for_admin == [('algebra', 2), ('secret', 1), ('draft', 1)]


def test_normalize_keywords():
    raw = ['  Math ', 'math', '', 'Algebra', None]
    assert keywords.normalize_keywords(raw) == ['math', 'algebra']


def test_normalize_keywords_rejects_overlong_keyword():
    with pytest.raises(InvalidInputError) as excinfo:
        keywords.normalize_keywords(['math', 'x' * (keywords.MAX_KEYWORD_LENGTH + 1)])

    assert 'too long' in excinfo.value.detail
    assert keywords.normalize_keywords(['y' * keywords.MAX_KEYWORD_LENGTH]) == ['y' * 100]


def test_split_keywords():
    assert keywords.split_keywords('Physics, optics ,,physics') == ['physics', 'optics']
    assert keywords.split_keywords('') == []
