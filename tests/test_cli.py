"""End-to-End-Tests der Kommandozeile (click CliRunner, isoliertes Verzeichnis)."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from main import cli


@pytest.fixture
def runner():
    r = CliRunner()
    with r.isolated_filesystem():
        result = r.invoke(cli, ["init"])
        assert result.exit_code == 0, result.output
        yield r


class TestCli:
    def test_init_creates_files(self, runner: CliRunner):
        assert Path("config/timetable.yaml").exists()
        assert Path("data/catalogs/s26.json").exists()

    def test_without_config_aborts(self):
        r = CliRunner()
        with r.isolated_filesystem():
            result = r.invoke(cli, ["courses"])
            assert result.exit_code == 1
            assert "Keine Konfiguration" in result.output

    def test_select_persists_state(self, runner: CliRunner):
        result = runner.invoke(cli, ["select", "Real Analysis"])
        assert result.exit_code == 0, result.output
        state = json.loads(Path("output/state.json").read_text(encoding="utf-8"))
        assert state["selected"] == [{"day": "Monday", "slot": "T1", "name": "Real Analysis"}]

    def test_select_replaces_in_cell(self, runner: CliRunner):
        runner.invoke(cli, ["select", "Real Analysis"])
        result = runner.invoke(cli, ["select", "Computer Systems Organisation"])
        assert "Ersetzt" in result.output
        state = json.loads(Path("output/state.json").read_text(encoding="utf-8"))
        assert [s["name"] for s in state["selected"]] == ["Computer Systems Organisation"]

    def test_select_unknown_fails(self, runner: CliRunner):
        result = runner.invoke(cli, ["select", "Alchemie"])
        assert result.exit_code == 1
        assert "Kein Kurs" in result.output

    def test_conflicting_listing(self, runner: CliRunner):
        runner.invoke(cli, ["select", "Real Analysis"])
        result = runner.invoke(cli, ["courses", "--conflicting"])
        assert result.exit_code == 0
        assert "Computer Systems Organisation" in result.output

    def test_remove_and_clear(self, runner: CliRunner):
        runner.invoke(cli, ["select", "Real Analysis"])
        runner.invoke(cli, ["select", "Linear Algebra"])
        runner.invoke(cli, ["remove", "Real Analysis"])
        state = json.loads(Path("output/state.json").read_text(encoding="utf-8"))
        assert [s["name"] for s in state["selected"]] == ["Linear Algebra"]

        runner.invoke(cli, ["clear"])
        state = json.loads(Path("output/state.json").read_text(encoding="utf-8"))
        assert state["selected"] == []

    def test_show(self, runner: CliRunner):
        runner.invoke(cli, ["select", "Automata Theory"])
        result = runner.invoke(cli, ["show"])
        assert result.exit_code == 0
        assert "Tuesday" in result.output

    def test_export_empty_selection(self, runner: CliRunner):
        result = runner.invoke(cli, ["export"])
        assert result.exit_code == 0
        assert "Nothing to export" in result.output
        assert not Path("output/IIITH_Timetable.ics").exists()

    def test_export_writes_ics(self, runner: CliRunner):
        runner.invoke(cli, ["select", "Linear Algebra"])
        result = runner.invoke(cli, ["export", "-o", "cal"])
        assert result.exit_code == 0, result.output
        text = Path("cal/IIITH_Timetable.ics").read_text(encoding="utf-8")
        assert text.count("BEGIN:VEVENT") == 2
        assert "SUMMARY:Linear Algebra" in text

    def test_browse_requires_filter(self, runner: CliRunner):
        result = runner.invoke(cli, ["browse"])
        assert result.exit_code != 0

    def test_theme_toggle(self, runner: CliRunner):
        result = runner.invoke(cli, ["theme", "dark"])
        assert result.exit_code == 0
        state = json.loads(Path("output/state.json").read_text(encoding="utf-8"))
        assert state["theme"] == "dark"

    def test_semesters(self, runner: CliRunner):
        result = runner.invoke(cli, ["semesters"])
        assert "S26" in result.output
        assert "M25" in result.output
