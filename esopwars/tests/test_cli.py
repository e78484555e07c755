"""
Tests for the command-line interface.
"""

from ..cli import main


class TestSimulate:
    def test_bot_game(self, capsys):
        assert main(["simulate", "--teams", "2", "--seed", "1"]) == 0

        out = capsys.readouterr().out
        assert "ended in phase: winner" in out
        assert "Founders:" in out

    def test_personalities(self, capsys):
        code = main(["simulate", "--teams", "3", "--seed", "2", "--personality", "cautious"])

        assert code == 0

    def test_unknown_personality(self, capsys):
        assert main(["simulate", "--teams", "2", "--personality", "reckless"]) == 1
        assert "Unknown personality" in capsys.readouterr().out

    def test_no_command(self, capsys):
        assert main([]) == 1
