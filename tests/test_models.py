"""
Unit tests for the data models (Participant, BracketMatch, Tournament).
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from brackets.models import Participant, BracketMatch, Tournament, PENDING, COMPLETED


class TestParticipant:
    """Tests for the Participant model."""

    def test_participant_creation(self):
        """Test creating a participant."""
        participant = Participant(id="p1", name="Eagles", seed=1)
        assert participant.id == "p1"
        assert participant.name == "Eagles"
        assert participant.seed == 1

    def test_copy_is_independent(self):
        """Test that a copy does not share state with the original."""
        participant = Participant(id="p1", name="Eagles", seed=1)
        clone = participant.copy()
        clone.name = "Changed"
        assert clone == Participant(id="p1", name="Changed", seed=1)
        assert participant.name == "Eagles"

    def test_dict_conversion(self):
        """Test to_dict and from_dict agree."""
        participant = Participant(id="p3", name="Hawks", seed=3)
        assert participant.to_dict() == {'id': 'p3', 'name': 'Hawks', 'seed': 3}
        assert Participant.from_dict(participant.to_dict()) == participant

    def test_from_dict_none(self):
        """Test that an empty slot stays empty."""
        assert Participant.from_dict(None) is None

    def test_participant_repr(self):
        """Test participant string representation."""
        repr_str = repr(Participant(id="p1", name="Eagles", seed=1))
        assert "Eagles" in repr_str
        assert "seed=1" in repr_str


class TestBracketMatch:
    """Tests for the BracketMatch model."""

    def test_new_match_is_empty(self):
        """Test a later-round match before any winner arrives."""
        match = BracketMatch(match_index=4, round=2)
        assert match.participants == []
        assert match.winner_id is None
        assert not match.is_decided
        assert match.get_winner() is None

    def test_slots(self):
        """Test slot accessors map 1 and 2 to participant1 and participant2."""
        match = BracketMatch(match_index=0, round=1)
        alice = Participant(id="a", name="Alice", seed=1)
        bob = Participant(id="b", name="Bob", seed=2)
        match.set_slot(2, bob)
        match.set_slot(1, alice)
        assert match.get_slot(1) is alice
        assert match.get_slot(2) is bob
        assert match.participants == [alice, bob]

    def test_get_winner(self):
        """Test the winner is looked up by id among the slots."""
        alice = Participant(id="a", name="Alice", seed=1)
        bob = Participant(id="b", name="Bob", seed=2)
        match = BracketMatch(match_index=0, round=1, participant1=alice, participant2=bob, winner_id="b")
        assert match.is_decided
        assert match.get_winner() is bob

    def test_dict_conversion(self):
        """Test a match with one empty slot survives conversion."""
        match = BracketMatch(
            match_index=2, round=1,
            participant1=Participant(id="a", name="Alice", seed=1),
            winner_id="a",
        )
        data = match.to_dict()
        assert data == {
            'match_index': 2,
            'round': 1,
            'participant1': {'id': 'a', 'name': 'Alice', 'seed': 1},
            'participant2': None,
            'winner_id': 'a',
        }
        restored = BracketMatch.from_dict(data)
        assert restored.participant1 == match.participant1
        assert restored.participant2 is None
        assert restored.winner_id == "a"


class TestTournament:
    """Tests for the Tournament aggregate."""

    def test_defaults(self):
        """Test a new tournament is pending single elimination."""
        tournament = Tournament(rounds=1, bracket=[BracketMatch(match_index=0, round=1)])
        assert tournament.status == PENDING
        assert tournament.format == 'single-elimination'
        assert tournament.bracket_size == 2
        assert tournament.final is tournament.bracket[0]

    def test_dict_conversion(self):
        """Test metadata and bracket survive conversion."""
        tournament = Tournament(
            rounds=1,
            bracket=[BracketMatch(
                match_index=0, round=1,
                participant1=Participant(id="a", name="Alice", seed=1),
                participant2=Participant(id="b", name="Bob", seed=2),
                winner_id="a",
            )],
            status=COMPLETED,
            name="Club Cup",
            date="2026-05-01",
            participant_type='player',
            slug='club-cup',
        )
        restored = Tournament.from_dict(tournament.to_dict())
        assert restored.to_dict() == tournament.to_dict()
        assert restored.final.get_winner().name == "Alice"

    def test_tournament_repr(self):
        """Test tournament string representation."""
        tournament = Tournament(rounds=1, bracket=[BracketMatch(match_index=0, round=1)], name="Club Cup")
        repr_str = repr(tournament)
        assert "Club Cup" in repr_str
        assert "pending" in repr_str
