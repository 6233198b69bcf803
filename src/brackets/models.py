"""
Data models for single elimination tournaments.
"""
from typing import Dict, List, Optional

PENDING = 'pending'
IN_PROGRESS = 'in_progress'
COMPLETED = 'completed'

STATUSES = (PENDING, IN_PROGRESS, COMPLETED)

SINGLE_ELIMINATION = 'single-elimination'


class Participant:
    def __init__(self, id, name, seed):
        self.id = id
        self.name = name
        self.seed = seed

    def copy(self):
        return Participant(id=self.id, name=self.name, seed=self.seed)

    def to_dict(self) -> Dict:
        return {'id': self.id, 'name': self.name, 'seed': self.seed}

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> Optional['Participant']:
        if data is None:
            return None
        return cls(id=data['id'], name=data['name'], seed=data['seed'])

    def __eq__(self, other):
        if not isinstance(other, Participant):
            return NotImplemented
        return (self.id, self.name, self.seed) == (other.id, other.name, other.seed)

    def __repr__(self):
        return f"Participant(id={self.id}, name={self.name}, seed={self.seed})"


class BracketMatch:
    def __init__(self, match_index, round, participant1=None, participant2=None, winner_id=None):
        self.match_index = match_index
        self.round = round
        self.participant1 = participant1
        self.participant2 = participant2
        self.winner_id = winner_id  # Set once, never cleared

    @property
    def is_decided(self) -> bool:
        return self.winner_id is not None

    @property
    def participants(self) -> List[Participant]:
        """Populated slots, participant1 first."""
        return [p for p in (self.participant1, self.participant2) if p is not None]

    def get_slot(self, slot: int) -> Optional[Participant]:
        return self.participant1 if slot == 1 else self.participant2

    def set_slot(self, slot: int, participant: Participant):
        if slot == 1:
            self.participant1 = participant
        else:
            self.participant2 = participant

    def get_winner(self) -> Optional[Participant]:
        for participant in self.participants:
            if participant.id == self.winner_id:
                return participant
        return None

    def to_dict(self) -> Dict:
        return {
            'match_index': self.match_index,
            'round': self.round,
            'participant1': self.participant1.to_dict() if self.participant1 else None,
            'participant2': self.participant2.to_dict() if self.participant2 else None,
            'winner_id': self.winner_id,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'BracketMatch':
        return cls(
            match_index=data['match_index'],
            round=data['round'],
            participant1=Participant.from_dict(data.get('participant1')),
            participant2=Participant.from_dict(data.get('participant2')),
            winner_id=data.get('winner_id'),
        )

    def __repr__(self):
        return (f"BracketMatch(match_index={self.match_index}, round={self.round}, "
                f"participant1={self.participant1}, participant2={self.participant2}, "
                f"winner_id={self.winner_id})")


class Tournament:
    """
    Tournament aggregate: round count, flat bracket and status.

    The bracket is ordered by round, then by position within the round.
    Its length and the round/match_index of every match are fixed when the
    bracket is built; only slots, winners and status change afterwards.
    Metadata (name, date, ...) is carried for the persistence layer and
    is not used by the bracket engine.
    """

    def __init__(self, rounds, bracket, status=PENDING, name=None, date=None,
                 format=SINGLE_ELIMINATION, participant_type='team', slug=None, created=None):
        self.rounds = rounds
        self.bracket = bracket
        self.status = status
        self.name = name
        self.date = date
        self.format = format
        self.participant_type = participant_type
        self.slug = slug
        self.created = created

    @property
    def bracket_size(self) -> int:
        return 2 ** self.rounds

    @property
    def final(self) -> BracketMatch:
        return self.bracket[-1]

    def to_dict(self) -> Dict:
        return {
            'slug': self.slug,
            'name': self.name,
            'date': self.date,
            'format': self.format,
            'participant_type': self.participant_type,
            'created': self.created,
            'rounds': self.rounds,
            'status': self.status,
            'bracket': [match.to_dict() for match in self.bracket],
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Tournament':
        return cls(
            rounds=data['rounds'],
            bracket=[BracketMatch.from_dict(m) for m in data.get('bracket', [])],
            status=data.get('status', PENDING),
            name=data.get('name'),
            date=data.get('date'),
            format=data.get('format', SINGLE_ELIMINATION),
            participant_type=data.get('participant_type', 'team'),
            slug=data.get('slug'),
            created=data.get('created'),
        )

    def __repr__(self):
        return (f"Tournament(name={self.name}, rounds={self.rounds}, "
                f"matches={len(self.bracket)}, status={self.status})")
