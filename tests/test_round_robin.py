from itertools import combinations

import pytest

from padelpairing.exceptions import (
    InsufficientParticipantsError,
    InvalidConfigurationError,
    InvalidTournamentStateError,
    TeamFormationError,
)
from padelpairing.models import (
    MatchStatus,
    Participant,
    ParticipantStatus,
    Standing,
    Team,
)
from padelpairing.pairing.round_robin import (
    calculate_round_robin_rounds,
    distribute_into_groups,
    generate_group_playoff,
    generate_round_robin,
    generate_round_robin_with_groups,
    get_bye_teams_for_round,
)


def _players(count, skills=False):
    return [
        Participant(
            id=f"p{i:02d}",
            skill_level=float(count - i) if skills else None,
            status=ParticipantStatus.CHECKED_IN,
        )
        for i in range(1, count + 1)
    ]


def _pair_keys(rounds):
    return [
        frozenset({m.team1.key, m.team2.key}) for r in rounds for m in r.matches
    ]


def test_four_doubles_teams_play_three_rounds_of_two():
    rounds = generate_round_robin(_players(8), is_doubles=True)

    assert len(rounds) == 3
    assert [len(r.matches) for r in rounds] == [2, 2, 2]
    assert [r.round_number for r in rounds] == [1, 2, 3]


def test_only_checked_in_players_are_scheduled():
    participants = _players(5)
    participants[4].status = ParticipantStatus.REGISTERED

    rounds = generate_round_robin(participants, is_doubles=False)

    scheduled = {pid for r in rounds for m in r.matches for pid in m.player_ids}
    assert scheduled == {"p01", "p02", "p03", "p04"}
    assert len(rounds) == 3


def test_every_pair_meets_exactly_once():
    participants = _players(6)
    rounds = generate_round_robin(participants, is_doubles=False)
    teams = [Team.single(p.id) for p in participants]

    pairs = _pair_keys(rounds)
    expected = {frozenset({a.key, b.key}) for a, b in combinations(teams, 2)}

    assert len(pairs) == len(expected) == 15
    assert set(pairs) == expected


def test_odd_field_gives_everyone_one_bye():
    participants = _players(5)
    rounds = generate_round_robin(participants, is_doubles=False)

    byes = [team_id for r in rounds for team_id in r.bye_ids]

    assert len(rounds) == 5
    assert all(len(r.matches) == 2 for r in rounds)
    assert sorted(byes) == [p.id for p in participants]
    assert get_bye_teams_for_round(rounds, 3) == rounds[2].bye_ids


def test_nobody_plays_twice_in_a_round():
    for r in generate_round_robin(_players(7), is_doubles=False):
        seen = [pid for m in r.matches for pid in m.player_ids]
        assert len(seen) == len(set(seen))


def test_round_counts():
    assert calculate_round_robin_rounds(4) == 3
    assert calculate_round_robin_rounds(5) == 5
    assert calculate_round_robin_rounds(1) == 0


def test_too_few_or_odd_doubles_players_are_rejected():
    with pytest.raises(InsufficientParticipantsError):
        generate_round_robin(_players(1), is_doubles=False)
    with pytest.raises(TeamFormationError):
        generate_round_robin(_players(5), is_doubles=True)


def test_snake_distribution_balances_groups():
    teams = [Team.single(str(i)) for i in range(1, 9)]

    groups = distribute_into_groups(teams, 3)

    assert [[t.id for t in g] for g in groups] == [
        ["1", "6", "7"],
        ["2", "5", "8"],
        ["3", "4"],
    ]


def test_groups_differ_by_at_most_one_team():
    stage = generate_round_robin_with_groups(
        _players(11, skills=True), 3, 1, is_doubles=False
    )

    sizes = [len(g.participant_ids) for g in stage.groups]
    assert max(sizes) - min(sizes) <= 1
    assert [g.group_name for g in stage.groups] == ["A", "B", "C"]
    assert all(m.group_number in (1, 2, 3) for m in stage.matches)


def test_invalid_group_settings_are_rejected():
    with pytest.raises(InvalidConfigurationError):
        generate_round_robin_with_groups(_players(6), 4, 1, is_doubles=False)
    with pytest.raises(InvalidConfigurationError):
        generate_round_robin_with_groups(_players(6), 2, 4, is_doubles=False)


def _finish_group_stage(stage):
    finished = []
    games = {}
    for match in stage.matches:
        match.status = MatchStatus.COMPLETED
        # the lower player id always wins 6-2
        if match.team1.id < match.team2.id:
            match.team1_score, match.team2_score = 6, 2
        else:
            match.team1_score, match.team2_score = 2, 6
        finished.append(match)
        winner, loser = sorted([match.team1.id, match.team2.id])
        games.setdefault(winner, [0, 0, 0])
        games.setdefault(loser, [0, 0, 0])
        games[winner][0] += 3
        games[winner][1] += 6
        games[winner][2] += 2
        games[loser][1] += 2
        games[loser][2] += 6
    standings = [
        Standing(
            tournament_id="t1",
            user_id=user_id,
            points=points,
            games_won=won,
            games_lost=lost,
        )
        for user_id, (points, won, lost) in games.items()
    ]
    return finished, standings


def test_group_playoff_cross_seeds_qualifiers():
    stage = generate_round_robin_with_groups(
        _players(8, skills=True), 2, 2, is_doubles=False
    )
    matches, standings = _finish_group_stage(stage)

    bracket = generate_group_playoff(stage, standings, matches)

    # group A holds p01 p04 p05 p08, group B p02 p03 p06 p07
    assert [team.id for team in bracket.seeds] == ["p01", "p02", "p04", "p03"]
    assert bracket.bracket_size == 4
    first_round = bracket.round_matches(1)
    assert {(m.team1.id, m.team2.id) for m in first_round} == {
        ("p01", "p03"),
        ("p02", "p04"),
    }


def test_group_playoff_waits_for_open_matches():
    stage = generate_round_robin_with_groups(_players(8), 2, 2, is_doubles=False)

    with pytest.raises(InvalidTournamentStateError):
        generate_group_playoff(stage, [], stage.matches[:-1])
