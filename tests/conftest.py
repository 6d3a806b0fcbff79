"""
Shared pytest fixtures for bracket host tests.

Running tests:
    pytest tests/
"""
import pytest
import sys
import os
import yaml

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from core.models import Participant


def make_records(count):
    """Backend-style participant records in registration order."""
    return [{'_id': f'p{i}', 'teamName': f'Team {i}'} for i in range(1, count + 1)]


@pytest.fixture
def records_4():
    return make_records(4)


@pytest.fixture
def records_5():
    return make_records(5)


@pytest.fixture
def seeded_4():
    return [Participant(f'p{i}', f'Team {i}', i) for i in range(1, 5)]


@pytest.fixture
def client():
    """Create a test client for the JSON API."""
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client


@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch):
    """Point the API at a temporary data directory with two tournaments."""
    import app as app_module

    tournaments_file = tmp_path / "tournaments.yaml"
    brackets_dir = tmp_path / "brackets"

    tournaments_file.write_text(yaml.dump({'tournaments': [
        {
            '_id': 't1',
            'title': 'Spring Cup',
            'format': 'single_elimination',
            'status': 'registration_closed',
            'participants': make_records(5),
        },
        {
            '_id': 't2',
            'title': 'League Night',
            'format': 'Round-Robin',
            'status': 'ongoing',
            'participants': make_records(4),
        },
        {
            '_id': 't3',
            'title': 'Empty Open',
            'format': 'single-elimination',
            'status': 'registration_open',
            'participants': [],
        },
    ]}, default_flow_style=False))

    monkeypatch.setattr(app_module, 'DATA_DIR', str(tmp_path))
    monkeypatch.setattr(app_module, 'TOURNAMENTS_FILE', str(tournaments_file))
    monkeypatch.setattr(app_module, 'BRACKETS_DIR', str(brackets_dir))
    monkeypatch.delenv('HOST_API_KEY', raising=False)

    return str(tmp_path)
