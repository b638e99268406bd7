from __future__ import annotations

import pytest


@pytest.mark.parametrize(
    ("text", "want_name", "want_tail"),
    [
        ("hello world", "hello", "world"),
        ("hello\tworld", "hello", "world"),
        ("hello   world", "hello", "world"),
        ("hello", "hello", ""),
        ("", "", ""),
        ("   ", "", ""),
        (" \t \n ", "", ""),
        ("\t\thello world", "hello", "world"),
        ("hello world   ", "hello", "world   "),
        ("cmd arg1\narg2\n", "cmd", "arg1\narg2\n"),
        ("hello\u00a0world", "hello", "world"),
        ("\u200b\u200c", "\u200b\u200c", ""),
    ],
)
def test_cut_field_splits_on_first_whitespace_run(text: str, want_name: str, want_tail: str) -> None:
    from linebased.expression import cut_field

    assert cut_field(text) == (want_name, want_tail)


@pytest.mark.parametrize(
    ("n", "text", "want"),
    [
        (-1, "", []),
        (0, "", []),
        (1, "", []),
        (1, "\n", []),
        (-1, "arg1 arg2", ["arg1", "arg2"]),
        (0, "arg1 arg2", []),
        (1, "arg1 arg2", ["arg1 arg2"]),
        (2, "arg1 arg2", ["arg1", "arg2"]),
        (3, "arg1 arg2", ["arg1", "arg2"]),
        (2, "arg1 arg2\t\t\t", ["arg1", "arg2\t\t\t"]),
        (3, "arg1 arg2\t\t\t", ["arg1", "arg2"]),
        (2, "arg1\n\targ2", ["arg1", "arg2"]),
    ],
)
def test_parse_args_final_argument_keeps_remaining_text(n: int, text: str, want: list[str]) -> None:
    from linebased.expression import parse_args

    assert parse_args(text, n) == want


def test_args_at_trims_trailing_newline_and_tolerates_out_of_range() -> None:
    from linebased.expression import parse_args, parse_args2, parse_args3

    args = parse_args("a b c\n", 2)
    assert args.at(0) == "a"
    assert args.at(1) == "b c"
    assert args.at(2) == ""
    assert args.at(-1) == ""

    assert parse_args2("x y z\n") == ("x", "y z")
    assert parse_args3("x\n") == ("x", "", "")


@pytest.mark.parametrize(
    ("name", "body", "want"),
    [
        ("cmd", "arg1 arg2\n", "cmd arg1 arg2\n"),
        ("cmd", "arg1\targ2\n", "cmd arg1\targ2\n"),
        ("cmd", "\targ1", "cmd arg1\n"),
        ("cmd", "", "cmd\n"),
        ("cmd", "arg1", "cmd arg1\n"),
        ("", "arg1 arg2\n", " arg1 arg2\n"),
        ("", "\n", "\n"),
        ("greet", "\nAlice\n", "greet\n\tAlice\n"),
        ("sql", "query\nSELECT 1\n", "sql query\n\tSELECT 1\n"),
    ],
)
def test_expression_string_reconstructs_source(name: str, body: str, want: str) -> None:
    from linebased.expression import Expanded

    expr = Expanded(name=name, body=body)
    assert expr.string() == want
    assert str(expr) == want


def test_expanded_where_reports_top_level_as_main() -> None:
    from linebased.expression import Expanded

    expr = Expanded(line=42, name="echo", body="hi\n", file="example.lb")

    assert expr.where() == "example.lb:42: main@42"
    assert expr.location_for_error() == "example.lb:42"
    assert expr.caller() == Expanded()


def test_expanded_where_uses_outermost_line_and_immediate_caller() -> None:
    from linebased.expression import Expanded

    outer = Expanded(line=10, name="outer", body="x\n", file="main.lb")
    inner = Expanded(line=2, name="inner", body="x\n", file="main.lb", stack=(outer,))
    expr = Expanded(line=5, name="echo", body="x\n", file="main.lb", stack=(outer, inner))

    assert expr.where() == "main.lb:10: inner@5"
    assert expr.location_for_error() == "main.lb:10: inner@5"
    assert expr.caller() is inner


def test_expanded_location_without_file_or_line() -> None:
    from linebased.expression import Expanded

    assert Expanded(line=3).location_for_error() == "<unknown>:3"
    assert Expanded(file="a.lb").location_for_error() == "a.lb"


def test_expression_is_immutable() -> None:
    from dataclasses import FrozenInstanceError

    from linebased.expression import Expression

    expr = Expression(line=1, name="a")
    with pytest.raises(FrozenInstanceError):
        expr.name = "b"  # type: ignore[misc]
