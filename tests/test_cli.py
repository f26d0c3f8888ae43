import os
import sys
from unittest import mock

import pytest

from sleepeec.cli import (
    Context,
    ErrorCode,
    Target,
    UsageError,
    help_text,
    load_targets,
    main,
    parse_arguments,
    run_commands,
    target_commands,
    validate_context,
)

BUILD_FILE = """
[app]
compiler = "gcc"
cflag = "-O2"
lflag = "-lm"
strict_mod = true
sources = ["main.c", "util.c"]

[lib]
compiler = "cc"
static_lib = true
sources = ["lib.c"]
"""


def test_parse_arguments_reads_all_options():
    ctx = parse_arguments(["-d", "build", "-p", "x.toml", "-t", "3"])
    assert (ctx.directory, ctx.path, ctx.thread_count, ctx.print_help) == ("build", "x.toml", 3, False)


def test_parse_arguments_help_stops():
    ctx = parse_arguments(["-h", "-x"])
    assert ctx.print_help is True


def test_parse_arguments_ignores_plain_words():
    ctx = parse_arguments(["word", "-t", "2"])
    assert ctx.thread_count == 2


@pytest.mark.parametrize("argv", [["-x"], ["-"], ["-t", "0"], ["-t", "abc"], ["-t"], ["-d"]])
def test_parse_arguments_errors(argv):
    with pytest.raises(UsageError) as info:
        parse_arguments(argv)
    assert info.value.code is ErrorCode.INVALID_ARGUMENT


def test_validate_context_defaults(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    ctx = validate_context(Context())
    assert ctx.path == "./sleepeec.toml"
    assert ctx.thread_count == 4


def test_validate_context_enters_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "sub").mkdir()
    ctx = validate_context(Context(directory="sub"))
    assert ctx.directory == "sub"
    assert ctx.path == "./sleepeec.toml"
    assert os.getcwd() == str(tmp_path / "sub")


def test_validate_context_missing_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(UsageError) as info:
        validate_context(Context(directory="absent"))
    assert info.value.code is ErrorCode.INVALID_DIRECTORY


def test_validate_context_thread_limit():
    with pytest.raises(UsageError) as info:
        validate_context(Context(thread_count=10**9))
    assert info.value.code is ErrorCode.INVALID_THRD_COUNT


def test_load_targets_reads_fields():
    app, lib = load_targets(BUILD_FILE)
    assert app == Target(
        name="app",
        compiler_path="gcc",
        cflag="-O2",
        lflag="-lm",
        sources=["main.c", "util.c"],
        strict_mod=True,
    )
    assert lib.static_library is True
    assert lib.sources == ["lib.c"]


def test_load_targets_requires_sources():
    with pytest.raises(UsageError) as info:
        load_targets('[app]\ncompiler = "gcc"\n')
    assert info.value.code is ErrorCode.INVALID_FILE_BAD


def test_load_targets_bad_toml():
    with pytest.raises(UsageError) as info:
        load_targets("[app\n")
    assert info.value.code is ErrorCode.INVALID_FILE_BAD


def test_target_commands_objects_and_link():
    target = Target(name="app", compiler_path="gcc", cflag="-O2", lflag="-lm", sources=["a.c", "b.c"])
    cmds = target_commands(target)
    assert cmds.objects == ["gcc -c a.c -O2", "gcc -c b.c -O2"]
    assert cmds.link == "gcc -o app -lm"


def test_target_commands_library_flags():
    target = Target(name="lib", compiler_path="cc", sources=["x.c"], static_library=True,
                    dynamic_library=True, strict_mod=True)
    cmds = target_commands(target)
    assert cmds.link.startswith("ar rcs -o lib")
    assert cmds.link.endswith("-fPIC -shared")
    assert "-Werror" in cmds.objects[0]


def test_run_commands_returns_statuses():
    exe = f'"{sys.executable}"'
    commands = [f'{exe} -c "pass"', f'{exe} -c "import sys; sys.exit(3)"']
    assert run_commands(commands, 2) == [0, 3]


def test_run_commands_rejects_zero_concurrency():
    with pytest.raises(ValueError):
        run_commands(["echo"], 0)


def test_main_without_arguments():
    assert main([]) == 1


def test_main_help(capsys):
    assert main(["-h"]) == 0
    assert capsys.readouterr().out == help_text()


def test_main_bad_option(capsys):
    assert main(["-q"]) == int(ErrorCode.INVALID_ARGUMENT)
    assert "-h show this output" in capsys.readouterr().out


def test_main_missing_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert main(["-t", "2"]) == int(ErrorCode.INVALID_FILE_MISSING)


def test_main_runs_build(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "sleepeec.toml").write_text(BUILD_FILE, encoding="utf-8")
    with mock.patch("subprocess.run") as run:
        run.return_value.returncode = 0
        status = main(["-t", "1"])
    assert status == 0
    ran = [call.args[0] for call in run.call_args_list]
    expected = []
    for target in load_targets(BUILD_FILE):
        expected.extend(target_commands(target).objects)
    assert ran[: len(expected)] == expected
    assert ran[-1].startswith("ar rcs -o lib")
    assert len(ran) == len(expected) + 2