"""
Single elimination bracket generation and result advancement.

The bracket is a flat list of matches sized ``bracket_size - 1`` and ordered
by round, then by position within the round. A match is addressed by its
``match_index`` for the whole life of the tournament.
"""
import logging
import math
from typing import List, Dict, Tuple, Optional

from brackets.errors import (
    AlreadyDecidedError,
    InvalidInputError,
    InvalidParticipantError,
    MatchNotFoundError,
)
from brackets.models import (
    BracketMatch,
    Participant,
    Tournament,
    PENDING,
    IN_PROGRESS,
    COMPLETED,
)

logger = logging.getLogger(__name__)


def get_round_name(round_number: int, total_rounds: int) -> str:
    """Get the name of a round based on number of teams entering it."""
    teams_in_round = 2 ** (total_rounds - round_number + 1)
    if teams_in_round == 2:
        return "Final"
    elif teams_in_round == 4:
        return "Semifinal"
    elif teams_in_round == 8:
        return "Quarterfinal"
    else:
        return f"Round of {teams_in_round}"


def calculate_bracket_size(num_teams: int) -> int:
    """Calculate the bracket size (next power of 2)."""
    if num_teams <= 0:
        return 0
    return 2 ** math.ceil(math.log2(num_teams))


def calculate_byes(num_teams: int) -> int:
    """Calculate number of byes needed."""
    bracket_size = calculate_bracket_size(num_teams)
    return bracket_size - num_teams


def calculate_total_rounds(num_teams: int) -> int:
    bracket_size = calculate_bracket_size(num_teams)
    if bracket_size < 2:
        return 0
    return int(math.log2(bracket_size))


def count_matches_in_round(bracket_size: int, round_number: int) -> int:
    return bracket_size // 2 ** round_number


def get_round_offset(bracket_size: int, round_number: int) -> int:
    """Index of the first match of a round in the flat bracket."""
    return bracket_size - bracket_size // 2 ** (round_number - 1)


def get_next_match_slot(match_index: int, round_number: int, total_rounds: int) -> Optional[Tuple[int, int]]:
    """
    Locate where the winner of a match plays next.

    Returns (next_match_index, slot) where slot is 1 for participant1 and 2
    for participant2, or None for the final.

    For a match at position p within its round, the winner goes to position
    p // 2 of the next round; even positions fill participant1, odd
    positions fill participant2.
    """
    if round_number >= total_rounds:
        return None
    bracket_size = 2 ** total_rounds
    position = match_index - get_round_offset(bracket_size, round_number)
    next_index = get_round_offset(bracket_size, round_number + 1) + position // 2
    slot = 1 if position % 2 == 0 else 2
    return next_index, slot


def _generate_bracket_order(bracket_size: int) -> List[int]:
    """
    Generate the standard tournament bracket order.
    This ensures that if all higher seeds win, they meet in the proper rounds.

    For 8 teams: [1, 8, 4, 5, 2, 7, 3, 6]
    This gives matchups: 1v8, 4v5, 2v7, 3v6
    Winners: 1v4 side, 2v3 side
    Final: 1v2 (if chalk)

    Seeds above the number of participants are byes, so the top seeds are
    the ones paired against an empty slot.
    """
    if bracket_size == 2:
        return [1, 2]

    # Recursive generation
    half_size = bracket_size // 2
    upper_half = _generate_bracket_order(half_size)

    # Create lower half as complement
    lower_half = [bracket_size + 1 - seed for seed in upper_half]

    # Interleave: pair each upper seed with its complement
    result = []
    for u, l in zip(upper_half, lower_half):
        result.extend([u, l])

    return result


def _validate_participants(participants: List[Participant]):
    if len(participants) < 2:
        raise InvalidInputError("Need at least 2 participants")

    ids = [p.id for p in participants]
    if any(not participant_id for participant_id in ids):
        raise InvalidInputError("Every participant needs an id")
    if len(set(ids)) != len(ids):
        raise InvalidInputError("Participant ids must be unique")

    seeds = sorted(p.seed for p in participants)
    if seeds != list(range(1, len(participants) + 1)):
        raise InvalidInputError(f"Seeds must run from 1 to {len(participants)} without gaps")


def _is_vacant(tournament: Tournament, match: BracketMatch) -> bool:
    """
    True when no participant can ever reach this match.

    A match at round r, position p is fed by the round 1 matches
    p * 2**(r-1) .. (p+1) * 2**(r-1) - 1; it is vacant when all of
    those are empty.
    """
    bracket_size = tournament.bracket_size
    position = match.match_index - get_round_offset(bracket_size, match.round)
    span = 2 ** (match.round - 1)
    first = position * span
    return all(not tournament.bracket[i].participants for i in range(first, first + span))


def _sibling_index(tournament: Tournament, match: BracketMatch) -> int:
    """Index of the match whose winner meets this match's winner."""
    offset = get_round_offset(tournament.bracket_size, match.round)
    position = match.match_index - offset
    return offset + (position ^ 1)


def _propagate_winner(tournament: Tournament, match: BracketMatch) -> BracketMatch:
    """
    Carry a decided match's winner forward through the bracket.

    The winner is copied into its slot in the next round. If nobody can
    ever arrive in the opposite slot, the next match is a bye: it is decided
    on the spot and propagation continues from it.

    Returns the last match decided, which is the final when the bye chain
    reaches it.
    """
    current = match
    while current.round < tournament.rounds:
        winner = current.get_winner()
        next_index, slot = get_next_match_slot(current.match_index, current.round, tournament.rounds)
        next_match = tournament.bracket[next_index]
        next_match.set_slot(slot, winner.copy())
        logger.debug("Advanced %s from match %d to match %d (slot %d)",
                     winner.name, current.match_index, next_index, slot)

        sibling = tournament.bracket[_sibling_index(tournament, current)]
        if not _is_vacant(tournament, sibling):
            break

        next_match.winner_id = winner.id
        logger.debug("Match %d is a bye for %s", next_index, winner.name)
        current = next_match

    return current


def build_bracket(participants: List[Participant]) -> Tournament:
    """
    Build a single elimination bracket from seeded participants.

    Round 1 uses standard bracket seeding (1 vs N, 2 vs N-1, ... arranged so
    that top seeds meet as late as possible). When the field is not a power
    of two, the top seeds are paired against empty slots; those byes are
    decided immediately and their winners placed in round 2.

    Returns a pending Tournament with ``rounds`` and the full bracket.
    Raises InvalidInputError for fewer than 2 participants, duplicate ids
    or seeds that do not run 1..N.
    """
    _validate_participants(participants)

    num_teams = len(participants)
    bracket_size = calculate_bracket_size(num_teams)
    total_rounds = calculate_total_rounds(num_teams)

    # Create seed-to-participant mapping
    seed_to_participant = {p.seed: p for p in participants}
    bracket_order = _generate_bracket_order(bracket_size)

    bracket = []
    for i in range(0, len(bracket_order), 2):
        participant1 = seed_to_participant.get(bracket_order[i])
        participant2 = seed_to_participant.get(bracket_order[i + 1])
        bracket.append(BracketMatch(
            match_index=len(bracket),
            round=1,
            participant1=participant1.copy() if participant1 else None,
            participant2=participant2.copy() if participant2 else None,
        ))

    # Later rounds start empty and are filled as winners advance
    for round_number in range(2, total_rounds + 1):
        for _ in range(count_matches_in_round(bracket_size, round_number)):
            bracket.append(BracketMatch(match_index=len(bracket), round=round_number))

    tournament = Tournament(rounds=total_rounds, bracket=bracket, status=PENDING)

    for match in bracket[:count_matches_in_round(bracket_size, 1)]:
        if is_bye(match):
            match.winner_id = match.participants[0].id
            _propagate_winner(tournament, match)

    if tournament.final.is_decided:
        tournament.status = COMPLETED

    logger.info("Built bracket: %d participants, %d rounds, %d byes",
                num_teams, total_rounds, bracket_size - num_teams)
    return tournament


def _get_match(tournament: Tournament, match_index) -> BracketMatch:
    if (not isinstance(match_index, int) or isinstance(match_index, bool)
            or not 0 <= match_index < len(tournament.bracket)):
        raise MatchNotFoundError(f"Match {match_index} not found in bracket")
    return tournament.bracket[match_index]


def record_result(tournament: Tournament, match_index: int, winner_id: str) -> Tournament:
    """
    Record the winner of a match and advance them through the bracket.

    The tournament is updated in place and returned. Nothing is changed
    when validation fails:
    - MatchNotFoundError if match_index is outside the bracket
    - AlreadyDecidedError if the match already has a winner
    - InvalidParticipantError if a slot is still empty or winner_id is
      neither participant

    Status moves pending -> in_progress on the first recorded result and
    to completed when the final is decided.
    """
    match = _get_match(tournament, match_index)

    if match.is_decided:
        raise AlreadyDecidedError(f"Match {match_index} already has a winner")
    if match.participant1 is None or match.participant2 is None:
        raise InvalidParticipantError("Match is not ready to be played")
    if winner_id not in (match.participant1.id, match.participant2.id):
        raise InvalidParticipantError("Winner is not a participant in this match")

    match.winner_id = winner_id
    last_decided = _propagate_winner(tournament, match)

    if last_decided.round == tournament.rounds:
        tournament.status = COMPLETED
        logger.info("Tournament %s completed, champion: %s",
                    tournament.name or '', last_decided.get_winner().name)
    elif tournament.status == PENDING:
        tournament.status = IN_PROGRESS

    return tournament


def get_champion(tournament: Tournament) -> Optional[Participant]:
    """Return the winner of the final, or None until the tournament is completed."""
    if tournament.status != COMPLETED:
        return None
    return tournament.final.get_winner()


def is_bye(match: BracketMatch) -> bool:
    """A round 1 match with exactly one participant."""
    return match.round == 1 and len(match.participants) == 1


def is_playable(match: BracketMatch) -> bool:
    """Both participants known and no result yet."""
    return len(match.participants) == 2 and not match.is_decided


def get_matches_in_round(tournament: Tournament, round_number: int) -> List[BracketMatch]:
    offset = get_round_offset(tournament.bracket_size, round_number)
    count = count_matches_in_round(tournament.bracket_size, round_number)
    return tournament.bracket[offset:offset + count]


def get_playable_matches(tournament: Tournament) -> List[BracketMatch]:
    return [match for match in tournament.bracket if is_playable(match)]


def get_bracket_display(tournament: Tournament) -> Dict:
    """
    Get bracket data formatted for UI display.

    Returns dict with:
    - 'rounds': list of {'round', 'name', 'matches'} in round order, each
      match dict flagged with 'is_bye' and 'is_playable'
    - 'total_rounds', 'bracket_size', 'total_teams', 'byes'
    - 'status' and 'champion' (participant dict or None)
    """
    rounds = []
    for round_number in range(1, tournament.rounds + 1):
        round_name = get_round_name(round_number, tournament.rounds)
        round_matches = []
        for match in get_matches_in_round(tournament, round_number):
            match_data = match.to_dict()
            match_data['is_bye'] = is_bye(match)
            match_data['is_playable'] = is_playable(match)
            round_matches.append(match_data)
        rounds.append({
            'round': round_number,
            'name': round_name,
            'matches': round_matches,
        })

    first_round = get_matches_in_round(tournament, 1) if tournament.rounds else []
    total_teams = sum(len(match.participants) for match in first_round)
    champion = get_champion(tournament)

    return {
        'rounds': rounds,
        'total_rounds': tournament.rounds,
        'bracket_size': tournament.bracket_size,
        'total_teams': total_teams,
        'byes': sum(1 for match in first_round if is_bye(match)),
        'status': tournament.status,
        'champion': champion.to_dict() if champion else None,
    }
