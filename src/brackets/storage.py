"""
YAML file storage for tournaments.

Each tournament lives in ``<data_dir>/tournaments/<slug>.yaml``. Updates
take a per-tournament file lock and replace the file atomically, so
concurrent result submissions are applied one after the other on the
latest saved state.
"""
import logging
import os
import re
import tempfile
from datetime import datetime
from typing import Dict, List, Optional

import yaml
from filelock import FileLock

from brackets.elimination import build_bracket, record_result
from brackets.errors import InvalidInputError, TournamentNotFoundError
from brackets.models import Participant, Tournament

logger = logging.getLogger(__name__)

LOCK_TIMEOUT_SECONDS = 10
PARTICIPANT_TYPES = ('player', 'team')


def _slugify(name: str) -> str:
    """Convert tournament name to filesystem-safe slug."""
    slug = name.lower().strip()
    slug = re.sub(r'[^a-z0-9\s-]', '', slug)
    slug = re.sub(r'[\s-]+', '-', slug)
    slug = slug.strip('-')
    return slug or 'tournament'


def participants_from_entries(entries: List) -> List[Participant]:
    """
    Turn a list of names or {id, name} mappings into seeded participants.

    Seed is the 1-based position in the list. A bare name is its own id.
    """
    participants = []
    for seed, entry in enumerate(entries, start=1):
        if isinstance(entry, dict):
            name = entry.get('name')
            participant_id = entry.get('id') or name
        else:
            name = entry
            participant_id = entry
        if not isinstance(name, str):
            raise InvalidInputError(f"Participant {seed} needs a text name")
        if isinstance(participant_id, bool) or not isinstance(participant_id, (str, int)):
            raise InvalidInputError(f"Participant {seed} has an invalid id")
        name = name.strip()
        participant_id = str(participant_id).strip()
        if not name:
            raise InvalidInputError(f"Participant {seed} has no name")
        participants.append(Participant(id=participant_id, name=name, seed=seed))
    return participants


class TournamentStore:
    def __init__(self, data_dir: str, lock_timeout: float = LOCK_TIMEOUT_SECONDS):
        self.data_dir = data_dir
        self.tournaments_dir = os.path.join(data_dir, 'tournaments')
        self.lock_timeout = lock_timeout

    def _path(self, slug: str) -> str:
        return os.path.join(self.tournaments_dir, f'{slug}.yaml')

    def _lock(self, slug: str) -> FileLock:
        return FileLock(os.path.join(self.tournaments_dir, f'{slug}.lock'), timeout=self.lock_timeout)

    def _unique_slug(self, name: str) -> str:
        base = _slugify(name)
        slug = base
        counter = 2
        while os.path.exists(self._path(slug)):
            slug = f'{base}-{counter}'
            counter += 1
        return slug

    def _write(self, tournament: Tournament):
        """Write to a temp file in the same directory, then replace the target."""
        path = self._path(tournament.slug)
        fd, temp_path = tempfile.mkstemp(dir=self.tournaments_dir, suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                yaml.dump(tournament.to_dict(), f, default_flow_style=False, sort_keys=False)
            os.replace(temp_path, path)
        except BaseException:
            if os.path.exists(temp_path):
                os.remove(temp_path)
            raise

    def create(self, name: str, participants: List[Participant], date: Optional[str] = None,
               participant_type: str = 'team') -> Tournament:
        """Build a bracket for the participants and save it as a new tournament."""
        if not isinstance(name, str) or not name.strip():
            raise InvalidInputError("Name is required")
        if participant_type not in PARTICIPANT_TYPES:
            raise InvalidInputError(f"Participant type must be one of: {', '.join(PARTICIPANT_TYPES)}")

        tournament = build_bracket(participants)
        tournament.name = name.strip()
        tournament.date = date
        tournament.participant_type = participant_type
        tournament.created = datetime.now().isoformat()

        os.makedirs(self.tournaments_dir, exist_ok=True)
        with FileLock(os.path.join(self.tournaments_dir, '.create.lock'), timeout=self.lock_timeout):
            tournament.slug = self._unique_slug(name)
            self._write(tournament)

        logger.info("Created tournament %s with %d participants", tournament.slug, len(participants))
        return tournament

    def load(self, slug: str) -> Tournament:
        if not re.match(r'^[a-z0-9][a-z0-9-]*$', slug) or not os.path.exists(self._path(slug)):
            raise TournamentNotFoundError(f"Tournament '{slug}' not found")
        with open(self._path(slug), 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
        if not isinstance(data, dict):
            raise TournamentNotFoundError(f"Tournament '{slug}' is not a valid tournament file")
        tournament = Tournament.from_dict(data)
        tournament.slug = slug
        return tournament

    def list_tournaments(self) -> List[Dict]:
        """Summaries of all stored tournaments, newest first."""
        if not os.path.isdir(self.tournaments_dir):
            return []
        summaries = []
        for filename in os.listdir(self.tournaments_dir):
            if not filename.endswith('.yaml'):
                continue
            slug = filename[:-len('.yaml')]
            try:
                tournament = self.load(slug)
            except (yaml.YAMLError, KeyError, TypeError, TournamentNotFoundError) as e:
                logger.warning(f'Failed to parse {filename}: {e}')
                continue
            summaries.append({
                'slug': tournament.slug,
                'name': tournament.name,
                'date': tournament.date,
                'format': tournament.format,
                'status': tournament.status,
                'created': tournament.created,
            })
        summaries.sort(key=lambda s: s.get('created') or '', reverse=True)
        return summaries

    def record_result(self, slug: str, match_index: int, winner_id: str) -> Tournament:
        """Apply a match result to the latest saved state and save it."""
        self.load(slug)
        with self._lock(slug):
            tournament = self.load(slug)
            record_result(tournament, match_index, winner_id)
            self._write(tournament)
        logger.info("Recorded winner %s for match %s in %s", winner_id, match_index, slug)
        return tournament

    def delete(self, slug: str):
        self.load(slug)
        with self._lock(slug):
            os.remove(self._path(slug))
        logger.info("Deleted tournament %s", slug)
