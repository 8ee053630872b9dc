"""
Tests for the command line interface.
"""

import json

import pytest

from concursos.app import main, parse_position, split_list


@pytest.fixture
def cli(tmp_path, monkeypatch, capsys):
    """Run the CLI against a fresh database; returns captured stdout."""
    monkeypatch.chdir(tmp_path)
    for var in ("CONCURSOS_DB_PATH", "CONCURSOS_PROFESSION_MATCH", "CONCURSOS_RETRIES", "CONCURSOS_LOG_DIR"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("CONCURSOS_LOG_LEVEL", "ERROR")
    db = str(tmp_path / "cli.db")

    def run(*args):
        main(["--db", db, *args])
        return capsys.readouterr().out

    run("init")
    return run


class TestHelpers:

    def test_split_list(self):
        assert split_list("Professor, Médico,,") == ["Professor", "Médico"]
        assert split_list(None) == []

    def test_parse_position(self):
        assert parse_position("Professor:3") == {"profession": "Professor", "vacancies": 3}
        assert parse_position("Professor") == {"profession": "Professor", "vacancies": 1}
        assert parse_position("Técnico: TI") == {"profession": "Técnico: TI", "vacancies": 1}


class TestCandidateCommands:

    def test_add_and_list(self, cli):
        out = cli("candidate", "add", "--name", "Ana", "--cpf", "111", "--professions", "Professor,Engenheiro")
        assert "Candidate created: 1" in out

        listed = json.loads(cli("--json", "candidate", "list"))
        assert listed == [{"id": 1, "name": "Ana", "cpf": "111", "professions": ["Professor", "Engenheiro"]}]

    def test_list_empty(self, cli):
        assert "No candidates registered." in cli("candidate", "list")

    def test_duplicate_exits(self, cli):
        cli("candidate", "add", "--name", "Ana", "--cpf", "111", "--professions", "Professor")
        with pytest.raises(SystemExit) as exc_info:
            cli("candidate", "add", "--name", "Bia", "--cpf", "111", "--professions", "Médico")
        assert "already exists" in str(exc_info.value.code)

    def test_remove_unknown_exits(self, cli):
        with pytest.raises(SystemExit) as exc_info:
            cli("candidate", "remove", "7")
        assert "not found" in str(exc_info.value.code)


class TestContestAndMatchCommands:

    def test_match_both_directions(self, cli):
        cli("candidate", "add", "--name", "Ana", "--cpf", "111", "--professions", "Engenheiro,Professor")
        cli("candidate", "add", "--name", "Bia", "--cpf", "222", "--professions", "Médico")
        cli("contest", "add", "--agency", "SEDU", "--edital", "9/2016", "--code", "A", "--position", "Professor:2")
        cli("contest", "add", "--agency", "SESA", "--edital", "1/2017", "--code", "B", "--position", "Médico")

        contests = json.loads(cli("--json", "match", "candidate", "--cpf", "111"))
        assert [c["code"] for c in contests] == ["A"]
        assert contests[0]["positions"] == [{"profession": "Professor", "vacancies": 2}]

        candidates = json.loads(cli("--json", "match", "contest", "--code", "B"))
        assert [c["cpf"] for c in candidates] == ["222"]

        assert "No compatible contests." in cli("match", "candidate", "--cpf", "999")

    def test_profession_match_setting(self, cli, monkeypatch):
        cli("candidate", "add", "--name", "Ana", "--cpf", "111", "--professions", "medico")
        cli("contest", "add", "--agency", "SESA", "--edital", "1/2017", "--code", "B", "--position", "Médico")

        assert json.loads(cli("--json", "match", "candidate", "--cpf", "111")) == []
        monkeypatch.setenv("CONCURSOS_PROFESSION_MATCH", "accent-insensitive")
        assert len(json.loads(cli("--json", "match", "candidate", "--cpf", "111"))) == 1

    def test_contest_without_positions_exits(self, cli):
        with pytest.raises(SystemExit) as exc_info:
            cli("contest", "add", "--agency", "SEDU", "--edital", "9/2016", "--code", "A")
        assert "position" in str(exc_info.value.code)

    def test_contest_remove(self, cli):
        cli("contest", "add", "--agency", "SEDU", "--edital", "9/2016", "--code", "A", "--position", "Professor")
        assert "Contest removed: 1" in cli("contest", "remove", "1")
        assert "No contests registered." in cli("contest", "list")


class TestImportCommand:

    @pytest.fixture
    def import_file(self, tmp_path):
        path = tmp_path / "seed.json"
        path.write_text(json.dumps({
            "candidates": [
                {"name": "Ana", "cpf": "111", "professions": ["Professor"]},
                {"name": "Dup", "cpf": "111", "professions": ["Médico"]},
                {"name": "Bad", "cpf": "", "professions": ["Médico"]},
            ],
            "contests": [
                {"agency": "SEDU", "edital": "9/2016", "code": "A",
                 "positions": [{"profession": "Professor", "vacancies": 2}]},
            ],
        }), encoding="utf-8")
        return path

    def test_import(self, cli, import_file):
        out = cli("import", "--input", str(import_file))
        assert "imported=2 skipped=1 invalid=1" in out
        assert len(json.loads(cli("--json", "candidate", "list"))) == 1

    def test_dry_run_writes_nothing(self, cli, import_file):
        out = cli("import", "--input", str(import_file), "--dry-run")
        assert "[DRY RUN] Done. imported=2 skipped=1 invalid=1" in out
        assert "No candidates registered." in cli("candidate", "list")

    def test_dry_run_matches_real_run_for_registered_records(self, cli, tmp_path):
        cli("candidate", "add", "--name", "Ana", "--cpf", "111", "--professions", "Professor")
        path = tmp_path / "again.json"
        path.write_text(json.dumps({
            "candidates": [{"name": "Ana", "cpf": "111", "professions": ["Professor"]}],
        }), encoding="utf-8")

        dry = cli("import", "--input", str(path), "--dry-run")
        real = cli("import", "--input", str(path))

        assert "imported=0 skipped=1 invalid=0" in dry
        assert "imported=0 skipped=1 invalid=0" in real

    def test_null_section_is_empty(self, cli, tmp_path):
        path = tmp_path / "null.json"
        path.write_text(json.dumps({"candidates": None, "contests": []}), encoding="utf-8")
        assert "imported=0 skipped=0 invalid=0" in cli("import", "--input", str(path))

    @pytest.mark.parametrize("section", [3, "Ana", {"cpf": "111"}])
    def test_section_must_be_list(self, cli, tmp_path, section):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"candidates": section}), encoding="utf-8")
        with pytest.raises(SystemExit) as exc_info:
            cli("import", "--input", str(path))
        assert "'candidates' must be a list" in str(exc_info.value.code)
        assert "No candidates registered." in cli("candidate", "list")

    def test_missing_file(self, cli, tmp_path):
        with pytest.raises(SystemExit):
            cli("import", "--input", str(tmp_path / "nope.json"))


class TestFailures:

    def test_uninitialized_database(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("CONCURSOS_LOG_LEVEL", "ERROR")
        monkeypatch.delenv("CONCURSOS_RETRIES", raising=False)
        with pytest.raises(SystemExit) as exc_info:
            main(["--db", str(tmp_path / "fresh.db"), "candidate", "list"])
        assert "Store failure" in str(exc_info.value.code)

    def test_bad_configuration(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("CONCURSOS_PROFESSION_MATCH", "fuzzy")
        with pytest.raises(SystemExit) as exc_info:
            main(["--db", str(tmp_path / "x.db"), "candidate", "list"])
        assert "Configuration error" in str(exc_info.value.code)

    def test_version(self, capsys, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        main(["--version"])
        assert capsys.readouterr().out.strip() == "0.1.0"
