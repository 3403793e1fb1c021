import io

import pytest

from minishell.commands import Command, Redirection, RedirType
from minishell.env import Environment
from minishell.heredoc import (
    HeredocInterrupted,
    clear_heredocs,
    process_heredocs,
    read_heredoc,
)


class _InterruptingStream:
    def readline(self):
        raise KeyboardInterrupt


def test_read_heredoc_stops_at_delimiter_and_expands():
    env = Environment.from_envp(["NAME=bob"])
    prompts = io.StringIO()
    text = read_heredoc("EOF", env, io.StringIO("hello\n$NAME\nEOF\nafter\n"), prompts)
    assert text == "hello\nbob\n"
    assert prompts.getvalue() == "> " * 3


def test_read_heredoc_end_of_input():
    text = read_heredoc("EOF", Environment(), io.StringIO("one\ntwo"), io.StringIO())
    assert text == "one\ntwo\n"


def test_read_heredoc_empty_line_ends_input():
    text = read_heredoc("EOF", Environment(), io.StringIO("a\n\nb\nEOF\n"), io.StringIO())
    assert text == "a\n"


def test_read_heredoc_interrupted():
    with pytest.raises(HeredocInterrupted) as info:
        read_heredoc("EOF", Environment(), _InterruptingStream(), io.StringIO())
    assert info.value.status == 130


def test_process_and_clear_heredocs():
    heredoc = Redirection(RedirType.HEREDOC, "END")
    outfile = Redirection(RedirType.OUT, "file")
    commands = [Command(["cat"], [heredoc, outfile])]
    process_heredocs(commands, Environment(), io.StringIO("x\nEND\n"), io.StringIO())
    assert heredoc.heredoc == "x\n"
    assert outfile.heredoc is None
    clear_heredocs(commands)
    assert heredoc.heredoc is None


def test_process_heredocs_reads_in_order():
    first = Redirection(RedirType.HEREDOC, "A")
    second = Redirection(RedirType.HEREDOC, "B")
    commands = [Command(["cat"], [first]), Command(["cat"], [second])]
    process_heredocs(
        commands, Environment(), io.StringIO("1\nA\n2\nB\n"), io.StringIO()
    )
    assert (first.heredoc, second.heredoc) == ("1\n", "2\n")