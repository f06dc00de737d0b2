import pytest

from genmake.getopt import (
    IN_ORDER,
    ArgKind,
    LongOption,
    OptionParser,
    getopt,
    getopt_long,
    getopt_long_only,
)

GEN_MAKE_OPTIONS = [
    LongOption("help", ArgKind.NO, "h"),
    LongOption("debug", ArgKind.NO, "d"),
    LongOption("no-recurse", ArgKind.NO, "r"),
]


@pytest.fixture(autouse=True)
def _no_posix(monkeypatch):
    monkeypatch.delenv("POSIXLY_CORRECT", raising=False)


def values(options):
    return [(o.option, o.argument) for o in options]


def test_simple_short_options():
    opts, rest = getopt(["prog", "-a", "-b", "val", "file"], "ab:")
    assert values(opts) == [("a", None), ("b", "val")]
    assert rest == ["file"]


def test_clustered_argument_consumes_rest_of_cluster():
    opts, _ = getopt(["prog", "-abxyz"], "ab:")
    assert values(opts) == [("a", None), ("b", "xyz")]


def test_getopt_stops_at_first_non_option():
    opts, rest = getopt(["prog", "file1", "-a"], "a")
    assert opts == []
    assert rest == ["file1", "-a"]


def test_getopt_long_permutes_non_options():
    argv = ["prog", "file1", "-a", "file2", "-b", "x", "file3"]
    opts, rest = getopt_long(argv, "ab:", [])
    assert values(opts) == [("a", None), ("b", "x")]
    assert rest == ["file1", "file2", "file3"]


def test_permutation_preserves_arguments():
    argv = ["prog", "n1", "n2", "-a", "n3", "-a", "-a", "n4"]
    parser = OptionParser(argv, "a", [])
    assert len(list(parser)) == 3
    assert sorted(parser.argv) == sorted(argv)
    assert parser.remaining() == ["n1", "n2", "n3", "n4"]


def test_double_dash_ends_options():
    opts, rest = getopt_long(["prog", "-a", "--", "-b"], "ab", [])
    assert values(opts) == [("a", None)]
    assert rest == ["-b"]


def test_double_dash_after_non_options_permutes():
    opts, rest = getopt_long(["prog", "x", "-a", "--", "-b"], "ab", [])
    assert values(opts) == [("a", None)]
    assert rest == ["x", "-b"]


def test_single_dash_is_non_option():
    opts, rest = getopt_long(["prog", "-", "-a"], "a", [])
    assert values(opts) == [("a", None)]
    assert rest == ["-"]


def test_gen_make_option_table():
    argv = ["prog", "-d", "--debug", "--no-recurse", "-h"]
    opts, rest = getopt_long(argv, "hdrp", GEN_MAKE_OPTIONS)
    assert [o.option for o in opts] == ["d", "d", "r", "h"]
    assert [o.long_index for o in opts] == [None, 1, 2, None]
    assert rest == []


def test_long_option_abbreviation():
    opts, _ = getopt_long(["prog", "--no"], "hdrp", GEN_MAKE_OPTIONS)
    assert opts[0].option == "r"
    assert opts[0].long_index == 2


def test_long_option_arguments():
    longs = [
        LongOption("output", ArgKind.REQUIRED, "o"),
        LongOption("level", ArgKind.OPTIONAL),
    ]
    argv = ["prog", "--output=a.mk", "--output", "b.mk", "--level", "--level=3", "--level:4"]
    opts, rest = getopt_long(argv, "", longs)
    assert values(opts) == [
        ("o", "a.mk"),
        ("o", "b.mk"),
        ("level", None),
        ("level", "3"),
        ("level", "4"),
    ]
    assert rest == []


def test_ambiguous_long_option(capsys):
    longs = [LongOption("debug", ArgKind.NO, "d"), LongOption("define", ArgKind.REQUIRED, "D")]
    opts, _ = getopt_long(["prog", "--de"], "", longs, program_name="prog")
    assert opts[0].option == "?"
    assert opts[0].optopt is None
    assert capsys.readouterr().err == "prog: option `--de' is ambiguous\n"


def test_same_value_partial_matches_are_not_ambiguous():
    longs = [LongOption("verbose", ArgKind.NO, "v"), LongOption("verbosity", ArgKind.NO, "v")]
    opts, _ = getopt_long(["prog", "--verb"], "", longs)
    assert values(opts) == [("v", None)]
    assert opts[0].long_index == 0


def test_long_option_given_unwanted_argument(capsys):
    opts, _ = getopt_long(["prog", "--debug=1"], "hdrp", GEN_MAKE_OPTIONS, program_name="prog")
    assert opts[0].option == "?"
    assert opts[0].optopt == "d"
    assert "doesn't allow an argument" in capsys.readouterr().err


def test_long_option_missing_argument(capsys):
    longs = [LongOption("output", ArgKind.REQUIRED, "o")]
    opts, _ = getopt_long(["prog", "--output"], "", longs, program_name="prog")
    assert opts[0].option == "?"
    assert opts[0].optopt == "o"
    assert capsys.readouterr().err == "prog: option `--output' requires an argument\n"


def test_unknown_long_option(capsys):
    opts, _ = getopt_long(["prog", "--nope"], "hdrp", GEN_MAKE_OPTIONS, program_name="prog")
    assert opts[0].option == "?"
    assert capsys.readouterr().err == "prog: unrecognized option `--nope'\n"


def test_unknown_short_option(capsys):
    opts, _ = getopt(["prog", "-x", "-a"], "a", program_name="prog")
    assert values(opts) == [("?", None), ("a", None)]
    assert opts[0].optopt == "x"
    assert capsys.readouterr().err == "prog: invalid option -- x\n"


def test_missing_short_argument(capsys):
    opts, _ = getopt(["prog", "-b"], "b:", program_name="prog")
    assert opts[0].option == "?"
    assert opts[0].optopt == "b"
    assert capsys.readouterr().err == "prog: option requires an argument -- b\n"


def test_leading_colon_is_quiet_and_reports_colon(capsys):
    opts, _ = getopt(["prog", "-b"], ":b:")
    assert opts[0].option == ":"
    assert opts[0].is_error
    assert capsys.readouterr().err == ""


def test_optional_short_argument():
    opts, rest = getopt(["prog", "-c", "next", "-cval"], "c::")
    assert values(opts) == [("c", None)]
    assert rest == ["next", "-cval"]
    opts, _ = getopt(["prog", "-cval"], "c::")
    assert values(opts) == [("c", "val")]


def test_leading_dash_returns_non_options_in_order():
    opts, rest = getopt_long(["prog", "x", "-a", "y"], "-a", [])
    assert values(opts) == [(IN_ORDER, "x"), ("a", None), (IN_ORDER, "y")]
    assert rest == []


def test_leading_plus_disables_permutation():
    opts, rest = getopt_long(["prog", "x", "-a"], "+a", [])
    assert opts == []
    assert rest == ["x", "-a"]


def test_posixly_correct(monkeypatch, capsys):
    monkeypatch.setenv("POSIXLY_CORRECT", "1")
    opts, rest = getopt_long(["prog", "-x", "y", "-a"], "a", [], program_name="prog")
    assert [o.option for o in opts] == ["?"]
    assert rest == ["y", "-a"]
    assert capsys.readouterr().err == "prog: illegal option -- x\n"


def test_long_only_accepts_single_dash():
    longs = [LongOption("verbose", ArgKind.NO, "V"), LongOption("all", ArgKind.NO, "A")]
    opts, _ = getopt_long_only(["prog", "-verb", "-v", "-all"], "v", longs)
    assert [o.option for o in opts] == ["V", "v", "A"]


def test_w_semicolon_long_option():
    opts, _ = getopt_long(["prog", "-W", "debug", "-Whelp"], "W;", GEN_MAKE_OPTIONS)
    assert [o.option for o in opts] == ["d", "h"]


def test_w_semicolon_missing_argument(capsys):
    opts, _ = getopt_long(["prog", "-W"], "W;", GEN_MAKE_OPTIONS, program_name="prog")
    assert opts[0].option == "?"
    assert opts[0].optopt == "W"
    assert "option requires an argument -- W" in capsys.readouterr().err


def test_next_option_after_end_keeps_returning_none():
    parser = OptionParser(["prog", "-a"], "a", None, False, False, "prog")
    assert parser.next_option().option == "a"
    assert parser.next_option() is None
    assert parser.next_option() is None
    assert parser.remaining() == []


def test_default_program_name_from_argv(capsys):
    getopt(["some/dir/tool", "-z"], "a")
    assert capsys.readouterr().err.startswith("tool: ")