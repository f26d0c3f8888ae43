"""Command line front end: reads a build description and runs its commands."""

from __future__ import annotations

import os
import subprocess
import sys
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterable, Optional, Sequence

from .errors import TomlError
from .parser import parse

DEFAULT_BUILD_FILE = "./sleepeec.toml"
DEFAULT_THREAD_COUNT = 4
DEFAULT_MAX_CONCURRENCY = 8
STRICT_FLAGS = (
    "-Wall -Wextra -Wpedantic -Wshadow -Wundef -Werror -Wno-unused-parameter "
    "-fstrict-aliasing -fno-strict-overflow -fwrapv"
)
DYNAMIC_FLAGS = "-fPIC -shared"
STATIC_ARCHIVER = "ar rcs"

_OPTIONS = "hdpt"
_OPTIONS_WITH_VALUE = "dpt"
_FALLBACK_THREADS_MAX = 2019


class ErrorCode(IntEnum):
    """Exit codes reported for bad invocations or build files."""

    STUB = 0
    INVALID_DIRECTORY = 1
    INVALID_ARGUMENT = 2
    INVALID_FILE_MISSING = 3
    INVALID_THRD_COUNT = 4
    INVALID_FILE_BAD = 5


class UsageError(Exception):
    """An invocation or build-file problem carrying its exit code."""

    def __init__(self, code: ErrorCode, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(message)


@dataclass
class Context:
    """Settings gathered from the command line."""

    print_help: bool = False
    thread_count: int = 0
    directory: Optional[str] = None
    path: Optional[str] = None


@dataclass
class Target:
    """One build target described by a table of the build file."""

    name: str
    compiler_path: str = ""
    cflag: str = ""
    lflag: str = ""
    sources: list[str] = field(default_factory=list)
    static_library: bool = False
    dynamic_library: bool = False
    strict_mod: bool = False


@dataclass
class TargetCommands:
    """Commands building a target: one per object file, then the link step."""

    objects: list[str]
    link: str


def help_text() -> str:
    """Return the usage summary."""
    return (
        "-h show this output\n"
        "-t [value] number of thread used (can slow down if too high for cpu)\n"
        "-d [directory_name] exec sleepeebuild.toml in directory\n"
        "-p [path] look for sleepeebuild.toml at path and execute in working directory.\n"
    )


def _atoi(text: str) -> int:
    text = text.lstrip(" \t\n\r\v\f")
    sign = 1
    if text[:1] in ("+", "-"):
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    digits = ""
    for ch in text:
        if not ("0" <= ch <= "9"):
            break
        digits += ch
    return sign * int(digits) if digits else 0


def parse_arguments(argv: Sequence[str]) -> Context:
    """Build a ``Context`` from command-line arguments (program name excluded).

    Only the character after the dash selects an option; arguments that do
    not start with a dash are ignored. Raises ``UsageError`` on a bad option.
    """
    context = Context()
    args = iter(argv)
    for arg in args:
        if not arg.startswith("-"):
            continue
        if len(arg) < 2:
            raise UsageError(ErrorCode.INVALID_ARGUMENT, f"invalid option {arg!r}")
        option = arg[1]
        if option not in _OPTIONS:
            raise UsageError(ErrorCode.INVALID_ARGUMENT, f"unknown option {arg!r}")
        if option == "h":
            context.print_help = True
            return context
        value = next(args, None)
        if value is None:
            raise UsageError(ErrorCode.INVALID_ARGUMENT, f"option {arg!r} needs a value")
        if option == "d":
            context.directory = value
        elif option == "p":
            context.path = value
        else:
            count = _atoi(value)
            if count < 1:
                raise UsageError(ErrorCode.INVALID_ARGUMENT, f"invalid thread count {value!r}")
            context.thread_count = count
    return context


def _threads_max() -> int:
    try:
        limit = os.sysconf("SC_THREAD_THREADS_MAX")
    except (AttributeError, ValueError, OSError):
        return _FALLBACK_THREADS_MAX
    return limit if limit > 0 else _FALLBACK_THREADS_MAX


def validate_context(context: Context) -> Context:
    """Fill in defaults, enter the requested directory and check the thread count."""
    if not context.path:
        context.path = DEFAULT_BUILD_FILE
    if context.directory:
        if not os.path.isdir(context.directory):
            raise UsageError(
                ErrorCode.INVALID_DIRECTORY,
                f"couldn't open dir: {context.directory}",
            )
        os.chdir(context.directory)
    if context.thread_count:
        if context.thread_count >= _threads_max():
            raise UsageError(
                ErrorCode.INVALID_THRD_COUNT,
                "Thread count is higher than maximum thread count",
            )
    else:
        context.thread_count = DEFAULT_THREAD_COUNT
    return context


def _read(getter, key):
    try:
        return getter(key)
    except TomlError:
        return None


def load_targets(text: str) -> list[Target]:
    """Read every top-level table of a build file as a ``Target``."""
    try:
        root = parse(text)
    except TomlError as exc:
        raise UsageError(ErrorCode.INVALID_FILE_BAD, f"bad build file: {exc}") from None

    targets = []
    for name, table in root.tables.items():
        target = Target(name=name)
        for key, attribute in (("compiler", "compiler_path"), ("cflag", "cflag"), ("lflag", "lflag")):
            value = _read(table.string_in, key)
            if value is not None:
                setattr(target, attribute, value)
        for key, attribute in (
            ("static_lib", "static_library"),
            ("dynamic_lib", "dynamic_library"),
            ("strict_mod", "strict_mod"),
        ):
            value = _read(table.bool_in, key)
            if value is not None:
                setattr(target, attribute, value)
        sources = table.array_in("sources")
        if sources is None:
            raise UsageError(ErrorCode.INVALID_FILE_BAD, f"target {name!r} has no sources")
        for index in range(len(sources)):
            source = _read(sources.string_at, index)
            if source is not None:
                target.sources.append(source)
        targets.append(target)
    return targets


def _join(parts: Iterable[str]) -> str:
    return " ".join(part for part in parts if part)


def target_commands(target: Target) -> TargetCommands:
    """Build the compile commands and the link command for ``target``."""
    strict = STRICT_FLAGS if target.strict_mod else ""
    objects = [
        _join((target.compiler_path, "-c", source, target.cflag, strict))
        for source in target.sources
    ]
    linker = STATIC_ARCHIVER if target.static_library else target.compiler_path
    dynamic = DYNAMIC_FLAGS if target.dynamic_library else ""
    link = _join((linker, "-o", target.name, target.lflag, dynamic))
    return TargetCommands(objects=objects, link=link)


def _run_one(command: str) -> int:
    return subprocess.run(command, shell=True).returncode


def run_commands(commands: Sequence[str], max_concurrency: int = DEFAULT_MAX_CONCURRENCY) -> list[int]:
    """Run shell commands, at most ``max_concurrency`` at once.

    Returns the exit status of each command, in the order given.
    """
    if max_concurrency < 1:
        raise ValueError("max_concurrency must be at least 1")
    if not commands:
        return []
    with ThreadPoolExecutor(max_workers=max_concurrency) as pool:
        return list(pool.map(_run_one, commands))


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the build described by the build file; return the exit status."""
    if argv is None:
        argv = sys.argv[1:]
    if not argv:
        return 1
    try:
        context = validate_context(parse_arguments(argv))
    except UsageError as exc:
        print(exc.message, file=sys.stderr)
        print(help_text(), end="")
        return int(exc.code)
    if context.print_help:
        print(help_text(), end="")
        return 0

    try:
        with open(context.path, encoding="utf-8") as handle:
            text = handle.read()
    except OSError as exc:
        print(f"cannot read {context.path}: {exc}", file=sys.stderr)
        return int(ErrorCode.INVALID_FILE_MISSING)

    try:
        targets = load_targets(text)
    except UsageError as exc:
        print(exc.message, file=sys.stderr)
        return int(exc.code)

    plans = [target_commands(target) for target in targets]
    statuses = run_commands(
        [command for plan in plans for command in plan.objects], context.thread_count
    )
    statuses += run_commands([plan.link for plan in plans], context.thread_count)
    return 0 if all(status == 0 for status in statuses) else 1