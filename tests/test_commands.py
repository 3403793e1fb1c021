import pytest

from minishell.commands import (
    Command,
    RedirType,
    Redirection,
    actual_token,
    is_builtin,
    is_redirection_operator,
    parse_commands,
    redir_type,
)
from minishell.tokenizer import ShellSyntaxError


@pytest.mark.parametrize(
    "token, expected",
    [
        ("<", RedirType.IN),
        (">", RedirType.OUT),
        (">>", RedirType.APPEND),
        ("<<", RedirType.HEREDOC),
        ("anything", RedirType.HEREDOC),
    ],
)
def test_redir_type(token, expected):
    assert redir_type(token) is expected


def test_actual_token_strips_marker():
    assert actual_token("\x01EOF") == "EOF"
    assert actual_token("plain") == "plain"
    assert actual_token("") == ""


@pytest.mark.parametrize("token", ["<", ">", ">>", "<<"])
def test_redirection_operators(token):
    assert is_redirection_operator(token)


@pytest.mark.parametrize("token", ["|", ">>>", "<>", "echo", ""])
def test_not_redirection_operators(token):
    assert not is_redirection_operator(token)


@pytest.mark.parametrize(
    "name", ["echo", "pwd", "exit", "env", "cd", "export", "unset", None]
)
def test_builtins(name):
    assert is_builtin(name)


@pytest.mark.parametrize("name", ["ls", "cat", "ECHO", ""])
def test_not_builtins(name):
    assert not is_builtin(name)


def test_single_command():
    commands = parse_commands(["echo", "hello", "world"])
    assert commands == [Command(["echo", "hello", "world"], [])]


def test_pipeline_splits_commands():
    commands = parse_commands(["ls", "-l", "|", "wc", "-l"])
    assert [c.args for c in commands] == [["ls", "-l"], ["wc", "-l"]]
    assert all(c.redirs == [] for c in commands)


def test_redirections_kept_in_order():
    commands = parse_commands(["cat", "<", "in", ">", "out", ">>", "log"])
    assert len(commands) == 1
    assert commands[0].args == ["cat"]
    assert commands[0].redirs == [
        Redirection(RedirType.IN, "in"),
        Redirection(RedirType.OUT, "out"),
        Redirection(RedirType.APPEND, "log"),
    ]


def test_heredoc_delimiter_marker_removed():
    commands = parse_commands(["cat", "<<", "\x01EOF"])
    assert commands[0].redirs == [Redirection(RedirType.HEREDOC, "EOF")]
    assert commands[0].redirs[0].heredoc is None


def test_marked_operator_is_an_argument():
    commands = parse_commands(["echo", "\x01>", "file"])
    assert commands[0].args == ["echo", ">", "file"]
    assert commands[0].redirs == []


def test_marked_pipe_does_not_split():
    commands = parse_commands(["echo", "\x01|", "x"])
    assert len(commands) == 1
    assert commands[0].args == ["echo", "|", "x"]


def test_redirection_only_command():
    commands = parse_commands([">", "out"])
    assert commands[0].args == []
    assert commands[0].name is None
    assert commands[0].redirs == [Redirection(RedirType.OUT, "out")]


def test_redirection_without_target_raises():
    with pytest.raises(ShellSyntaxError) as info:
        parse_commands(["echo", ">"])
    assert info.value.status == 2
    assert "newline" in info.value.message


def test_empty_tokens_give_no_commands():
    assert parse_commands([]) == []


def test_trailing_pipe_consumed():
    commands = parse_commands(["ls", "|"])
    assert [c.args for c in commands] == [["ls"]]


def test_command_name_property():
    commands = parse_commands(["grep", "x", "<", "f"])
    assert commands[0].name == "grep"