import re

import pytest

from tplkit import args
from tplkit.args import OptionTable

# --- Option table ----------------------------------------------------------- #


def test_table_lookup():
    table = OptionTable.of("hv", "f", "o")
    assert table.lookup("h") == args.ArgClass.NONE
    assert table.lookup("f") == args.ArgClass.REQUIRED
    assert table.lookup("o") == args.ArgClass.OPTIONAL
    assert "z" not in table


def test_table_lookup_unknown():
    with pytest.raises(args.UnknownOption):
        OptionTable.of("h").lookup("z")


def test_table_rejects_overlapping_classes():
    with pytest.raises(ValueError):
        OptionTable.of("hf", "f")


def test_table_rejects_long_names():
    with pytest.raises(ValueError):
        OptionTable().add("ab", args.ArgClass.NONE)


# --- Short options ---------------------------------------------------------- #


def test_parse_flags():
    res = args.parse(["-h", "-v"], OptionTable.of("hv"))
    assert res.opts == {"h": True, "v": True}
    assert res.context == {}
    assert res.args == []


def test_parse_bundled_flags():
    res = args.parse(["-hv"], OptionTable.of("hv"))
    assert res.opts == {"h": True, "v": True}
    assert res.context == {}
    assert res.args == []


def test_parse_required_split():
    res = args.parse(["-f", "data.yaml", "template.txt"], OptionTable.of("", "f"))
    assert res.opts == {"f": "data.yaml"}
    assert res.args == ["template.txt"]


def test_parse_required_inline():
    res = args.parse(["-fdata.yaml"], OptionTable.of("", "f"))
    assert res.opts == {"f": "data.yaml"}
    assert res.args == []


def test_parse_required_value_may_start_with_dash():
    res = args.parse(["-f", "-h"], OptionTable.of("h", "f"))
    assert res.opts == {"f": "-h"}


def test_parse_required_after_flags():
    res = args.parse(["-hfdata.yaml"], OptionTable.of("h", "f"))
    assert res.opts == {"h": True, "f": "data.yaml"}


def test_parse_required_takes_rest_of_cluster():
    res = args.parse(["-fh"], OptionTable.of("h", "f"))
    assert res.opts == {"f": "h"}


def test_parse_required_missing():
    with pytest.raises(args.MissingArgument) as e:
        args.parse(["-f"], OptionTable.of("", "f"))
    assert e.value.option == "f"
    assert str(e.value) == "-f: argument required."


def test_parse_required_missing_in_cluster():
    with pytest.raises(args.MissingArgument) as e:
        args.parse(["-hf"], OptionTable.of("h", "f"))
    assert e.value.option == "f"


def test_parse_optional():
    table = OptionTable.of("h", "", "o")
    assert args.parse(["-o"], table).opts == {"o": True}
    assert args.parse(["-ovalue"], table).opts == {"o": "value"}
    assert args.parse(["-oh"], table).opts == {"o": "h"}


def test_parse_optional_never_takes_next_token():
    res = args.parse(["-o", "file.txt"], OptionTable.of("", "", "o"))
    assert res.opts == {"o": True}
    assert res.args == ["file.txt"]


def test_parse_unknown_option():
    with pytest.raises(args.UnknownOption) as e:
        args.parse(["-z"], OptionTable.of("hv", "f"))
    assert e.value.option == "z"
    assert str(e.value) == "-z: unknown option."


def test_parse_unknown_option_in_cluster():
    with pytest.raises(args.UnknownOption) as e:
        args.parse(["-hzv"], OptionTable.of("hv"))
    assert e.value.option == "z"


def test_parse_repeated_option_last_wins():
    res = args.parse(["-f", "a.yaml", "-fb.yaml"], OptionTable.of("", "f"))
    assert res.opts == {"f": "b.yaml"}


def test_parse_lone_dash_is_consumed():
    res = args.parse(["-", "file.txt"], OptionTable.of("h"))
    assert res.opts == {}
    assert res.args == ["file.txt"]


# --- Context ---------------------------------------------------------------- #


def test_parse_context_value():
    res = args.parse(["--foo-bar=42"], OptionTable())
    assert res.context == {"foo_bar": 42}
    assert res.opts == {}


def test_parse_context_flag():
    res = args.parse(["--flag"], OptionTable())
    assert res.context == {"flag": True}


def test_parse_context_typed_values():
    res = args.parse(
        [
            "--name=World",
            "--ratio=0.5",
            "--debug=no",
            "--parent=nil",
            "--greeting='hello, world'",
            "--match=/a+b/",
        ],
        OptionTable(),
    )
    assert res.context["name"] == "World"
    assert res.context["ratio"] == 0.5
    assert res.context["debug"] is False
    assert res.context["parent"] is None
    assert res.context["greeting"] == "hello, world"
    assert isinstance(res.context["match"], re.Pattern)
    assert res.context["match"].pattern == "a+b"


def test_parse_context_empty_value():
    res = args.parse(["--name="], OptionTable())
    assert res.context == {"name": ""}


def test_parse_context_value_with_equal_sign():
    res = args.parse(["--expr=a=b"], OptionTable())
    assert res.context == {"expr": "a=b"}


def test_parse_context_repeated_last_wins():
    res = args.parse(["--x=1", "--x=2"], OptionTable())
    assert res.context == {"x": 2}


def test_parse_context_invalid():
    with pytest.raises(args.InvalidContextValue) as e:
        args.parse(["--bad!"], OptionTable())
    assert e.value.token == "--bad!"
    assert str(e.value) == "--bad!: invalid context value."


def test_parse_context_invalid_empty():
    with pytest.raises(args.InvalidContextValue):
        args.parse(["--"], OptionTable())

    with pytest.raises(args.InvalidContextValue):
        args.parse(["--=value"], OptionTable())


def test_errors_are_command_option_errors():
    assert issubclass(args.InvalidContextValue, args.CommandOptionError)
    assert issubclass(args.MissingArgument, args.CommandOptionError)
    assert issubclass(args.UnknownOption, args.CommandOptionError)


# --- Operands --------------------------------------------------------------- #


def test_parse_mixed():
    res = args.parse(
        ["-h", "--name=World", "-fdata.yaml", "a.txt", "b.txt"],
        OptionTable.of("h", "f"),
    )
    assert res.opts == {"h": True, "f": "data.yaml"}
    assert res.context == {"name": "World"}
    assert res.args == ["a.txt", "b.txt"]


def test_parse_stops_at_first_operand():
    res = args.parse(["-h", "file.txt", "-v", "--name=x"], OptionTable.of("hv"))
    assert res.opts == {"h": True}
    assert res.context == {}
    assert res.args == ["file.txt", "-v", "--name=x"]


def test_parse_leaves_argv_untouched():
    argv = ["-h", "file.txt"]
    args.parse(argv, OptionTable.of("h"))
    assert argv == ["-h", "file.txt"]


def test_parse_argv_consumes_in_place():
    argv = ["-hv", "--name=x", "-f", "data.yaml", "file.txt"]
    opts, context = args.parseArgv(argv, "hv", "f")
    assert opts == {"h": True, "v": True, "f": "data.yaml"}
    assert context == {"name": "x"}
    assert argv == ["file.txt"]


# --- Consuming -------------------------------------------------------------- #


def test_consume_opts():
    res = args.parse(["-h", "-fdata.yaml", "a.txt"], OptionTable.of("hv", "f"))
    assert res.consumeOpt("v", False) is False
    assert res.consumeOpt("h", False) is True
    assert res.tryConsumeOpt("f") == "data.yaml"
    assert res.tryConsumeOpt("f") is None
    assert res.opts == {}


def test_consume_args():
    res = args.parse(["a.txt", "b.txt"], OptionTable())
    assert res.consumeArg() == "a.txt"
    assert res.consumeArg() == "b.txt"
    assert res.consumeArg() is None
