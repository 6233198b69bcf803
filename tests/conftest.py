"""
Shared pytest fixtures for bracket tests.

Running tests:
    pytest tests/
"""
import pytest
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from brackets.models import Participant
from brackets.storage import TournamentStore

ADMIN_KEY = 'test-admin-key'


def make_participants(count):
    """Participants p1..pN named Team 1..Team N, seeded in order."""
    return [Participant(id=f"p{i}", name=f"Team {i}", seed=i) for i in range(1, count + 1)]


@pytest.fixture
def four_participants():
    return make_participants(4)


@pytest.fixture
def five_participants():
    return make_participants(5)


@pytest.fixture
def store(tmp_path):
    """Tournament store backed by a temporary directory."""
    return TournamentStore(str(tmp_path))


@pytest.fixture
def client(tmp_path, monkeypatch):
    """Test client writing to a temporary data directory with an admin key configured."""
    import app as app_module
    monkeypatch.setattr(app_module, 'DATA_DIR', str(tmp_path))
    monkeypatch.setenv('BRACKET_ADMIN_KEY', ADMIN_KEY)
    app_module.app.config['TESTING'] = True
    with app_module.app.test_client() as client:
        yield client


@pytest.fixture
def admin_headers():
    return {'Authorization': f'Bearer {ADMIN_KEY}'}
