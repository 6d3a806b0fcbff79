"""
Tests for the command line front end.
"""
import pytest
import sys
import os
import yaml
from unittest.mock import Mock

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

import main as cli
from main import load_participants, main


@pytest.fixture
def names_file(tmp_path):
    path = tmp_path / "participants.yaml"
    path.write_text(yaml.dump(['Ann', 'Bob', 'Cid']))
    return path


@pytest.fixture
def bracket_file(tmp_path, names_file):
    path = tmp_path / "bracket.yaml"
    assert main(['generate', str(names_file), '--output', str(path)]) == 0
    return path


def read_yaml(path):
    with open(path, encoding='utf-8') as f:
        return yaml.safe_load(f)


class TestLoadParticipants:
    def test_plain_names(self, names_file):
        participants, fmt = load_participants(names_file)
        assert participants[0] == {'_id': 'Ann', 'teamName': 'Ann'}
        assert fmt is None

    def test_mapping_with_format(self, tmp_path):
        path = tmp_path / "league.yaml"
        path.write_text(yaml.dump({'format': 'round_robin', 'participants': [
            {'_id': 'a1', 'teamName': 'Aces'}, {'_id': 'b2', 'teamName': 'Bears'},
        ]}))
        participants, fmt = load_participants(path)
        assert [p['_id'] for p in participants] == ['a1', 'b2']
        assert fmt == 'round_robin'


class TestGenerate:
    def test_prints_bracket(self, names_file, capsys):
        assert main(['generate', str(names_file)]) == 0
        out = capsys.readouterr().out
        assert 'Format: single-elimination  Rounds: 2  Matches: 3' in out
        assert '# Semi-Final' in out
        assert 'Match 1: Ann (#1) vs Bob (#2) [Scheduled]' in out
        assert 'Match 2: Cid (#3) vs TBD [Bye]' in out
        assert 'Match 3: TBD vs TBD [Awaiting]' in out

    def test_writes_output(self, bracket_file):
        data = read_yaml(bracket_file)
        assert data['format'] == 'single-elimination'
        assert len(data['matches']) == 3

    def test_resolve_byes(self, names_file, capsys):
        assert main(['generate', str(names_file), '--resolve-byes']) == 0
        assert 'Match 3: TBD vs Cid (#3) [Awaiting]' in capsys.readouterr().out

    def test_format_option(self, names_file, capsys):
        assert main(['generate', str(names_file), '--format', 'Round_Robin']) == 0
        out = capsys.readouterr().out
        assert 'Format: round-robin  Rounds: 1  Matches: 3' in out
        assert '# Round 1' in out

    def test_unknown_format(self, names_file, capsys):
        assert main(['generate', str(names_file), '--format', 'swiss']) == 1
        assert "Unknown tournament format: 'swiss'" in capsys.readouterr().err

    def test_double_elimination(self, names_file, capsys):
        assert main(['generate', str(names_file), '--format', 'double-elimination']) == 1
        assert 'not supported' in capsys.readouterr().err

    def test_empty_participants(self, tmp_path, capsys):
        path = tmp_path / "empty.yaml"
        path.write_text('')
        assert main(['generate', str(path)]) == 1
        assert 'No participants found' in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        assert main(['generate', str(tmp_path / 'nope.yaml')]) == 1
        assert capsys.readouterr().err.startswith('Error:')


class TestResult:
    def test_records_and_saves(self, bracket_file, capsys):
        assert main(['result', str(bracket_file), '1', 'Bob', '--notes', '2-1']) == 0
        matches = read_yaml(bracket_file)['matches']
        assert matches[0]['winner'] == 'Bob'
        assert matches[0]['result'] == {'winner': 'Bob', 'notes': '2-1'}
        assert matches[2]['team1']['id'] == 'Bob'
        assert 'winner: Bob' in capsys.readouterr().out

    def test_champion(self, bracket_file, capsys):
        main(['result', str(bracket_file), '1', 'Ann', '--resolve-byes'])
        capsys.readouterr()
        assert main(['result', str(bracket_file), '3', 'Cid']) == 0
        assert 'Champion: Cid' in capsys.readouterr().out

    def test_ineligible_match(self, bracket_file, capsys):
        before = read_yaml(bracket_file)
        assert main(['result', str(bracket_file), '3', 'Ann']) == 1
        assert 'Match 3' in capsys.readouterr().err
        assert read_yaml(bracket_file) == before


class TestShowAndSchedule:
    def test_show(self, bracket_file, capsys):
        capsys.readouterr()
        assert main(['show', str(bracket_file)]) == 0
        assert '# Final' in capsys.readouterr().out

    def test_schedule(self, tmp_path, capsys):
        path = tmp_path / "tournaments.yaml"
        path.write_text(yaml.dump({'tournaments': [
            {'_id': 'f1', 'title': 'Future Open', 'status': 'ongoing',
             'tournamentStart': '2099-05-01T10:00:00Z'},
        ]}))
        assert main(['schedule', str(path), '--view', 'all']) == 0
        out = capsys.readouterr().out
        assert '2099' in out
        assert '10:00 Tournament Begins - Future Open (upcoming)' in out

    def test_schedule_empty(self, tmp_path, capsys):
        path = tmp_path / "tournaments.yaml"
        path.write_text(yaml.dump({'tournaments': []}))
        assert main(['schedule', str(path)]) == 0
        assert 'No events found.' in capsys.readouterr().out

    def test_unknown_view_is_usage_error(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            main(['schedule', str(tmp_path / 'x.yaml'), '--view', 'weekly'])
        assert exc_info.value.code == 2


class TestPush:
    @pytest.fixture
    def backend(self, monkeypatch):
        backend = Mock()
        backend.get_tournament.return_value = {
            'success': True, 'data': {'_id': 't1', 'format': 'round-robin'}}
        backend.get_tournament_participants.return_value = {
            'success': True, 'data': {'participants': [{'_id': 'a', 'teamName': 'A'}, {'_id': 'b', 'teamName': 'B'}]}}
        monkeypatch.setattr(cli, 'ApiClient', lambda base_url=None: backend)
        return backend

    def test_push(self, backend, capsys):
        backend.create_tournament_brackets.return_value = {'success': True, 'data': None}
        assert main(['push', 't1']) == 0
        assert 'Format: round-robin' in capsys.readouterr().out
        assert backend.create_tournament_brackets.call_args.args[0] == 't1'

    def test_push_rejected(self, backend, capsys):
        backend.create_tournament_brackets.return_value = {'success': False, 'message': 'Forbidden'}
        assert main(['push', 't1']) == 2
        assert 'Forbidden' in capsys.readouterr().err
