#!/usr/bin/env python3
"""
Command line tool for single elimination tournaments.

Usage:
    python src/main.py create "Spring Open" data/participants.yaml --date 2026-04-01
    python src/main.py list
    python src/main.py show spring-open
    python src/main.py record spring-open 0 alice

The participants file is a YAML list of names or {id, name} mappings.
Seeds follow the order of the list.

Exit codes:
    0: Success
    1: Invalid input or rejected result
    2: Tournament or match not found
"""
import argparse
import logging
import os
import sys

import yaml
from brackets.elimination import get_champion, get_matches_in_round, get_round_name, is_bye
from brackets.errors import BracketError, InvalidInputError, MatchNotFoundError, TournamentNotFoundError
from brackets.storage import TournamentStore, participants_from_entries


def load_participants(file_path):
    with open(file_path, mode='r', encoding='utf-8') as file:
        entries = yaml.safe_load(file) or []
    if not isinstance(entries, list):
        raise InvalidInputError(f"{file_path} must contain a list of participants")
    return participants_from_entries(entries)


def _slot_label(participant):
    if participant is None:
        return "TBD"
    return f"{participant.seed}. {participant.name}"


def print_bracket(tournament):
    print(f"{tournament.name} ({tournament.slug}) - {tournament.status}")
    if tournament.date:
        print(f"Date: {tournament.date}")
    for round_number in range(1, tournament.rounds + 1):
        print(f"\n# {get_round_name(round_number, tournament.rounds)}")
        for match in get_matches_in_round(tournament, round_number):
            second = "BYE" if is_bye(match) else _slot_label(match.participant2)
            line = f"  [{match.match_index}] {_slot_label(match.participant1)} vs {second}"
            winner = match.get_winner()
            if winner:
                line += f"  -> {winner.name}"
            print(line)

    champion = get_champion(tournament)
    if champion:
        print(f"\nChampion: {champion.name}")


def cmd_create(store, args):
    participants = load_participants(args.participants)
    tournament = store.create(args.name, participants, date=args.date, participant_type=args.type)
    print(f"Created tournament '{tournament.slug}'")
    print_bracket(tournament)


def cmd_list(store, args):
    tournaments = store.list_tournaments()
    if not tournaments:
        print("No tournaments.")
        return
    for summary in tournaments:
        print(f"{summary['slug']}: {summary['name']} [{summary['status']}]")


def cmd_show(store, args):
    print_bracket(store.load(args.slug))


def cmd_record(store, args):
    tournament = store.record_result(args.slug, args.match_index, args.winner_id)
    print_bracket(tournament)


def build_parser():
    parser = argparse.ArgumentParser(description='Single elimination tournament brackets')
    parser.add_argument('--data-dir', default=os.environ.get('TOURNAMENT_DATA_DIR', 'data'),
                        help='Directory holding tournament data (default: $TOURNAMENT_DATA_DIR or ./data)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Show debug logging')
    subparsers = parser.add_subparsers(dest='command', required=True)

    create = subparsers.add_parser('create', help='Create a tournament from a participants file')
    create.add_argument('name')
    create.add_argument('participants', help='YAML list of participants in seed order')
    create.add_argument('--date')
    create.add_argument('--type', choices=['player', 'team'], default='team')
    create.set_defaults(func=cmd_create)

    list_parser = subparsers.add_parser('list', help='List tournaments')
    list_parser.set_defaults(func=cmd_list)

    show = subparsers.add_parser('show', help='Print a bracket')
    show.add_argument('slug')
    show.set_defaults(func=cmd_show)

    record = subparsers.add_parser('record', help='Record the winner of a match')
    record.add_argument('slug')
    record.add_argument('match_index', type=int)
    record.add_argument('winner_id')
    record.set_defaults(func=cmd_record)

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )
    store = TournamentStore(args.data_dir)
    try:
        args.func(store, args)
    except (TournamentNotFoundError, MatchNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except (BracketError, OSError, yaml.YAMLError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
