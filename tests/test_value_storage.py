import pytest

from otb.value_storage import ValueStorageError, dumps, load, loads, save

DOC = """!<DICT>
  // a comment
  entities: !<ARRAY>
    !<DICT>
      name: !<VALUE> world
      components: !<DICT>
    !<VALUE> plain
  gravity: !<VALUE> 9.8
"""


def test_loads_nested_document():
    assert loads(DOC) == {
        "entities": [{"name": "world", "components": {}}, "plain"],
        "gravity": "9.8",
    }


def test_dumps_fixed_format():
    assert dumps({"a": "1"}) == "!<DICT>\n  a: !<VALUE> 1\n"


def test_dumps_loads_round_trip():
    tree = {
        "list": ["x", ["y", {"k": "v"}], {}],
        "empty": [],
        "key with spaces": "value with spaces",
        "nested": {"deep": {"deeper": "bottom"}},
    }
    assert loads(dumps(tree)) == tree


def test_round_trip_drops_comments_but_keeps_data():
    tree = loads(DOC)
    assert loads(dumps(tree)) == tree
    assert "//" not in dumps(tree)


def test_first_duplicate_key_wins():
    text = "!<DICT>\n  a: !<VALUE> first\n  a: !<VALUE> second\n"
    assert loads(text) == {"a": "first"}


def test_value_text_keeps_colons():
    text = "!<DICT>\n  url: !<VALUE> a:b:c\n"
    assert loads(text) == {"url": "a:b:c"}


def test_root_array_is_accepted_by_loads():
    assert loads("!<ARRAY>\n  !<VALUE> x\n") == ["x"]


@pytest.mark.parametrize(
    "text",
    [
        "",
        "!<VALUE> lonely\n",
        "!<DICT>\n   a: !<VALUE> 1\n",
        "!<DICT>\n    a: !<VALUE> 1\n",
        "!<DICT>\n  no key here\n",
        "!<DICT>\n  a: !<WHAT> 1\n",
        "!<DICT>\n\n  a: !<VALUE> 1\n",
        "!<DICT>\n!<DICT>\n",
    ],
)
def test_malformed_documents_raise(text):
    with pytest.raises(ValueStorageError):
        loads(text)


def test_dumps_requires_dict_root():
    with pytest.raises(ValueStorageError):
        dumps(["a"])


def test_dumps_rejects_unstorable_values():
    with pytest.raises(ValueStorageError):
        dumps({"a": None})
    with pytest.raises(ValueStorageError):
        dumps({"a": 3})


def test_error_is_value_error():
    with pytest.raises(ValueError):
        loads("")


def test_save_and_load_file(tmp_path):
    tree = {"entities": [{"name": "box"}], "gravity": "9.8"}
    target = tmp_path / "level.vs"
    save(tree, target)
    assert load(target) == tree
    assert target.read_text(encoding="utf-8") == dumps(tree)


def test_save_truncates_previous_contents(tmp_path):
    target = tmp_path / "level.vs"
    save({"long": "x" * 100, "other": "y"}, target)
    save({"a": "b"}, target)
    assert load(target) == {"a": "b"}