# minishell

A small interactive shell. It reads command lines and splits them into
words and operators. It expands variables and runs the result, either as a
builtin or as an external program found through `PATH`.

## Features

- Pipelines: `ls -l | grep py | wc -l`
- Redirections: `<`, `>`, `>>` and heredocs with `<<`
- Single and double quotes, and backslash escapes
- Variable expansion: `$NAME` and `$?`, which gives the exit status of the
  last command
- Builtins:
  - `echo`, with `-n`, `-nn` and so on to drop the newline
  - `cd`, which goes to `HOME` with no argument and to `OLDPWD` with `-`
  - `pwd`, `export`, `unset`, `env` and `exit`
- `SHLVL` is incremented when the shell starts, or set to `1` if missing
- An exit status of `128 + n` for a program killed by signal `n`

A builtin on its own without redirections runs inside the shell, so `cd`,
`export` and `unset` change the shell's state. Inside a pipeline or with
redirections, a builtin runs on a copy of the environment. Any change it
makes is thrown away afterwards.

## Installing

```
pip install .
```

## Running

```
minishell
```

The same shell can also be started with `python -m minishell.shell`.

The prompt is `minishell$ `. End the session with `exit` or with Ctrl-D.
When standard input is not a terminal, lines are read from it one by one
and no prompt is shown.

```
minishell$ export GREETING=hello
minishell$ echo "$GREETING, world" | tr a-z A-Z
HELLO, WORLD
minishell$ cat << EOF
> value of HOME is $HOME
> EOF
value of HOME is /home/someone
minishell$ echo $?
0
```

A heredoc stops at three things:

- its delimiter
- an empty line
- the end of input

Variables in its lines are expanded.

## Using it from Python

The `Shell` class in `minishell.shell` runs lines without a terminal. This
is handy for scripting and tests:

```python
import io
from minishell.shell import Shell

out = io.StringIO()
shell = Shell({"PATH": "/usr/bin:/bin"}, out, io.StringIO())
status = shell.handle_line("echo one two")
print(out.getvalue(), status)
```

Two methods run input:

- `Shell.handle_line(line)` runs a single line and returns the new status.
- `Shell.run(lines)` handles each line in turn until `exit` or the end of
  the input, and returns the exit code.

`exit` raises `minishell.builtins.ShellExit`, which carries the status.

The building blocks are available as separate modules:

| Module | What it provides |
| --- | --- |
| `minishell.tokenizer` | `tokenize_input`, `validate_syntax`, `ShellSyntaxError`, `UnclosedQuotesError` |
| `minishell.expand` | `expand_token`, `expand_variable` |
| `minishell.commands` | `parse_commands`, `Command`, `Redirection`, `RedirType` |
| `minishell.heredoc` | `read_heredoc`, `process_heredocs` |
| `minishell.executor` | `execute`, `status_from_returncode` |
| `minishell.builtins` | the builtins and `run_builtin` |
| `minishell.export` | `export_builtin`, `export_lines` |
| `minishell.env` | `Environment`, `EnvVar` |
| `minishell.pathsearch` | `full_command_path`, `find_command_path` |
| `minishell.cformat` | `format_printf`, a small `%c %s %d %i %u %x %X %p` formatter |

## What it does not do

The shell has only what is listed above. It has none of the following:

- command lists with `;`, `&&` or `||`
- subshells or grouping with parentheses
- background jobs or job control
- filename globbing
- `${...}` parameter forms
- aliases, functions or scripting constructs such as `if` and `for`

Quoted `<`, `>` and `|` are kept as plain words.

## Running the tests

```
pip install .[test]
pytest
```