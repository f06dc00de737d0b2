import os
import stat

import pytest

from genmake.walk import Entry, main, walk_tree


@pytest.fixture
def tree(tmp_path):
    (tmp_path / "a.c").write_text("int x;\n")
    (tmp_path / "b.cc").write_text("")
    sub = tmp_path / "sub"
    sub.mkdir()
    (sub / "c.c").write_text("abc")
    return tmp_path


def test_walk_recursive_finds_everything(tree):
    paths = {e.path for e in walk_tree(str(tree))}
    assert paths == {
        os.path.join(str(tree), "a.c"),
        os.path.join(str(tree), "b.cc"),
        os.path.join(str(tree), "sub"),
        os.path.join(str(tree), "sub", "c.c"),
    }


def test_walk_non_recursive_stays_at_top(tree):
    names = {e.name for e in walk_tree(str(tree), recursive=False)}
    assert names == {"a.c", "b.cc", "sub"}


def test_directory_comes_before_its_contents(tree):
    paths = [e.path for e in walk_tree(str(tree))]
    assert paths.index(os.path.join(str(tree), "sub")) < paths.index(
        os.path.join(str(tree), "sub", "c.c")
    )


def test_sizes_and_dir_flag(tree):
    by_name = {e.name: e for e in walk_tree(str(tree))}
    assert by_name["a.c"].size == len("int x;\n")
    assert by_name["c.c"].size == len("abc")
    assert by_name["sub"].is_dir
    assert not by_name["a.c"].is_dir
    assert by_name["sub"].attribute_string()[1] == "D"


def test_trailing_separator_gives_same_paths(tree):
    plain = sorted(e.path for e in walk_tree(str(tree)))
    slashed = sorted(e.path for e in walk_tree(str(tree) + os.sep))
    assert plain == slashed


def test_empty_directory_name_raises():
    with pytest.raises(ValueError):
        list(walk_tree(""))


def test_missing_directory_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        list(walk_tree(str(tmp_path / "nope")))


def test_attribute_string_letters():
    entry = Entry("x", "x", 0, stat.FILE_ATTRIBUTE_DIRECTORY | stat.FILE_ATTRIBUTE_ARCHIVE)
    assert entry.attribute_string() == "AD----"
    everything = (
        stat.FILE_ATTRIBUTE_ARCHIVE
        | stat.FILE_ATTRIBUTE_DIRECTORY
        | stat.FILE_ATTRIBUTE_COMPRESSED
        | stat.FILE_ATTRIBUTE_SYSTEM
        | stat.FILE_ATTRIBUTE_HIDDEN
        | stat.FILE_ATTRIBUTE_READONLY
    )
    assert Entry("y", "y", 0, everything).attribute_string() == "ADCSHR"
    assert Entry("z", "z", 0, 0).attribute_string() == "------"


def test_main_lists_tree(tree, capsys):
    assert main(["walk", str(tree)]) == 0
    out = capsys.readouterr().out
    assert out.startswith("Attr      Size Path\n")
    assert "total: 4," in out
    assert f"total-size: {len('int x;\n') + len('abc')} bytes." in out
    assert os.path.join(str(tree), "sub", "c.c") in out


def test_main_usage(capsys):
    assert main(["walk"]) == 0
    assert capsys.readouterr().out == "Usage: walk dir-spec\n"


def test_main_reports_error(tmp_path, capsys):
    main(["walk", str(tmp_path / "missing")])
    out = capsys.readouterr().out
    assert "total: 0," in out
    assert ", rc: " in out