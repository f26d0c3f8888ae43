# sleepeec

A small build driver for C projects. It reads a TOML build file that
describes one or more targets, turns each target into shell commands and
runs them. It carries its own TOML reader and needs nothing beyond the
Python standard library.

## Installing

    pip install .

This installs the `sleepeec` command.

## Command line

    sleepeec -h
    sleepeec -d project_dir
    sleepeec -p path/to/sleepeec.toml -t 8

Options (only the character after the dash is looked at; arguments that do
not start with a dash are ignored):

- `-h` print the help text and exit with status 0
- `-t [value]` number of commands run at once; must be at least 1 and below
  the system's thread limit
- `-d [directory_name]` change into that directory before reading the build file
- `-p [path]` read the build file from that path

Without `-p` the build file is `./sleepeec.toml` (looked up after any `-d`).
Without `-t` four commands run at once.

Exit status:

| status | meaning |
|-------:|---------|
| 0 | help printed, or every command succeeded |
| 1 | no arguments given, or some command failed |
| 1 | `-d` names a directory that does not exist (`ErrorCode.INVALID_DIRECTORY`) |
| 2 | unknown option, option without its value, or a thread count below 1 (`INVALID_ARGUMENT`) |
| 3 | the build file cannot be read (`INVALID_FILE_MISSING`) |
| 4 | thread count at or above the system's thread limit (`INVALID_THRD_COUNT`) |
| 5 | the build file is not valid TOML or a target has no `sources` (`INVALID_FILE_BAD`) |

Bad options print a message on standard error followed by the help text.

## The build file

Each top-level table is a target, named by its key:

    [app]
    compiler = "clang"
    cflag = "-O2"
    lflag = "-lm"
    static_lib = false
    dynamic_lib = false
    strict_mod = true
    sources = ["main.c", "util.c"]

`sources` is required. Other keys are optional; a key whose value has the
wrong type is ignored.

For every source a compile command is built:

    <compiler> -c <source> <cflag> [strict flags]

where `strict_mod = true` adds
`-Wall -Wextra -Wpedantic -Wshadow -Wundef -Werror -Wno-unused-parameter -fstrict-aliasing -fno-strict-overflow -fwrapv`.
Then one link command per target:

    <compiler or "ar rcs"> -o <name> <lflag> [-fPIC -shared]

`static_lib = true` uses `ar rcs` in place of the compiler and
`dynamic_lib = true` adds `-fPIC -shared`. Empty parts are left out.

All compile commands of all targets run first, then all link commands, each
through the shell.

## Using it from Python

    from sleepeec.cli import load_targets, target_commands, run_commands

    for target in load_targets(text):
        commands = target_commands(target)   # TargetCommands(objects=[...], link="...")
        run_commands(commands.objects, 4)

`parse_arguments(argv)` and `validate_context(context)` give the `Context`
the command line would produce, raising `UsageError` with an `ErrorCode`.
`run_commands` returns each command's exit status in order. `main(argv)`
runs the whole command and returns its exit status.

The TOML reader is available on its own:

    from sleepeec.parser import parse, parse_file

    root = parse('name = "demo"\n[build]\nsources = ["a.c"]\n')
    root.string_in("name")                        # "demo"
    root.table_in("build").array_in("sources")    # an Array of one item
    root.table_in("build").array_in("sources").string_at(0)   # "a.c"

`Table` keeps values as their raw text and converts them on request with
`string_in`, `bool_in`, `int_in`, `float_in` and `timestamp_in`; `Array`
has the matching `*_at` methods. These return `None` when nothing is
stored there and raise `TomlError` when the value has another type.
`sleepeec.convert` holds the conversions themselves, and `sleepeec.utf8`
converts between UTF-8 bytes and code points.

Parsing errors raise `sleepeec.errors.TomlError`; syntax errors raise
`sleepeec.errors.TomlSyntaxError`, which carries the line number.

## What it does not do

- The compile commands name no output file, so objects land wherever the
  compiler puts them, and the link command does not list the object files;
  add them through `lflag` if needed.
- There is no dependency tracking: every command runs on every invocation,
  and targets are not ordered by what they need from one another.