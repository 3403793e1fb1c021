import io

import pytest

from minishell.builtins import ShellExit
from minishell.shell import Shell
from minishell.tokenizer import UNCLOSED_QUOTES


def make_shell(envp=None):
    out = io.StringIO()
    err = io.StringIO()
    if envp is None:
        envp = ["HOME=/tmp", "USER=alice", "PATH=/usr/bin:/bin"]
    return Shell(envp, out, err), out, err


def test_echo_writes_output():
    shell, out, _ = make_shell()
    assert shell.handle_line("echo hello world") == 0
    assert out.getvalue() == "hello world\n"


def test_variable_expansion():
    shell, out, _ = make_shell()
    shell.handle_line("echo $USER")
    assert out.getvalue() == "alice\n"


def test_shlvl_added_when_missing():
    shell, _, _ = make_shell()
    assert shell.env.get("SHLVL") == "1"


def test_shlvl_incremented():
    shell, _, _ = make_shell(["SHLVL=3"])
    assert shell.env.get("SHLVL") == "4"


def test_export_then_expand():
    shell, out, _ = make_shell()
    shell.handle_line("export FOO=bar")
    shell.handle_line("echo $FOO")
    assert out.getvalue() == "bar\n"
    assert shell.env.get("FOO") == "bar"


def test_empty_line_keeps_status_and_history():
    shell, out, _ = make_shell()
    shell.last_status = 7
    assert shell.handle_line("") == 7
    assert shell.history == []
    assert out.getvalue() == ""


def test_history_records_lines():
    shell, _, _ = make_shell()
    shell.handle_line("echo a")
    shell.handle_line("echo b")
    assert shell.history == ["echo a", "echo b"]


def test_unclosed_quotes_reported_status_unchanged():
    shell, out, _ = make_shell()
    shell.last_status = 5
    assert shell.handle_line("echo 'oops") == 5
    assert UNCLOSED_QUOTES in out.getvalue()


def test_tokenizer_syntax_error_keeps_status():
    shell, out, _ = make_shell()
    shell.last_status = 3
    assert shell.handle_line("echo >") == 3
    assert "newline" in out.getvalue()


def test_failed_builtin_status_is_expanded():
    shell, out, _ = make_shell()
    status = shell.handle_line("cd /definitely/not/a/real/dir")
    assert status == 1
    shell.handle_line("echo $?")
    assert out.getvalue().endswith("1\n")


def test_exit_raises_from_handle_line():
    shell, out, _ = make_shell()
    with pytest.raises(ShellExit) as info:
        shell.handle_line("exit 3")
    assert info.value.status == 3
    assert out.getvalue() == "exit\n"


def test_run_returns_exit_status():
    shell, _, _ = make_shell()
    assert shell.run(["echo hi\n", "exit 42\n", "echo never\n"]) == 42


def test_run_end_of_input_prints_exit():
    shell, out, _ = make_shell()
    assert shell.run(["echo hi\n"]) == 0
    assert out.getvalue() == "hi\nexit\n"


def test_run_stops_at_none():
    shell, out, _ = make_shell()
    assert shell.run(["echo one", None, "echo two"]) == 0
    assert "two" not in out.getvalue()
    assert out.getvalue().endswith("exit\n")


def test_pipeline_through_external_command():
    shell, out, _ = make_shell()
    assert shell.handle_line("echo hi | cat") == 0
    assert out.getvalue() == "hi\n"


def test_heredoc_is_expanded_and_fed():
    shell, out, _ = make_shell()
    shell.heredoc_input = io.StringIO("line $USER\nEOF\n")
    assert shell.handle_line("cat << EOF") == 0
    assert out.getvalue().endswith("line alice\n")
    assert out.getvalue().startswith("> ")


def test_unset_removes_variable():
    shell, out, _ = make_shell()
    shell.handle_line("unset USER")
    shell.handle_line("echo [$USER]")
    assert "USER" not in shell.env
    assert out.getvalue() == "[]\n"