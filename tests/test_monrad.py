import pytest

from padelpairing.exceptions import (
    InsufficientParticipantsError,
    InvalidConfigurationError,
)
from padelpairing.models import Participant, ParticipantStatus, Standing, Team
from padelpairing.pairing.monrad import (
    MonradConfig,
    calculate_monrad_config,
    default_final_bracket_size,
    default_swiss_rounds,
    generate_monrad_tournament,
    get_knockout_qualifiers,
    get_qualification_cutoff,
    has_qualified_for_knockout,
    seed_monrad_knockout,
    validate_monrad_config,
)


def _standings(count):
    return [
        Standing(tournament_id="t1", user_id=f"p{i:02d}") for i in range(1, count + 1)
    ]


def _players(count):
    return [
        Participant(
            id=f"p{i:02d}",
            skill_level=float(count - i),
            status=ParticipantStatus.CHECKED_IN,
        )
        for i in range(1, count + 1)
    ]


def test_defaults_follow_field_size():
    assert default_swiss_rounds(16) == 4
    assert default_swiss_rounds(200) == 7
    assert default_final_bracket_size(16) == 8
    assert default_final_bracket_size(12) == 4
    assert default_final_bracket_size(5) == 2


def test_recommended_config_tiers():
    assert calculate_monrad_config(6) == MonradConfig(3, 4)
    assert calculate_monrad_config(12) == MonradConfig(3, 8)
    assert calculate_monrad_config(24) == MonradConfig(4, 16)
    assert calculate_monrad_config(40) == MonradConfig(5, 32)
    assert calculate_monrad_config(300) == MonradConfig(6, 64)


def test_config_validation():
    assert validate_monrad_config(3, 8, 16) == []
    warnings = validate_monrad_config(3, 2, 16)
    assert len(warnings) == 1
    with pytest.raises(InvalidConfigurationError):
        validate_monrad_config(8, 8, 16)
    with pytest.raises(InvalidConfigurationError):
        validate_monrad_config(3, 6, 16)
    with pytest.raises(InvalidConfigurationError):
        validate_monrad_config(3, 32, 16)


def test_structure_has_paired_first_round_and_empty_bracket():
    tournament = generate_monrad_tournament(
        MonradConfig(swiss_rounds=3, final_bracket_size=4),
        _standings(8),
        is_doubles=False,
        participants=_players(8),
    )

    assert [r.round_number for r in tournament.phase1] == [1, 2, 3]
    assert len(tournament.phase1[0].matches) == 4
    assert tournament.phase1[1].matches == []
    assert tournament.phase2.bracket_size == 4
    assert all(
        m.team1 is None and m.team2 is None for m in tournament.phase2.matches.values()
    )
    assert not tournament.is_seeded


def test_participants_default_to_the_standings():
    tournament = generate_monrad_tournament(
        MonradConfig(), _standings(8), is_doubles=False, seed=1
    )

    assert tournament.swiss_rounds == 3
    assert tournament.final_bracket_size == 4
    assert {t.id for t in tournament.teams} == {s.user_id for s in _standings(8)}


def test_minimum_field_counts_players_not_teams():
    with pytest.raises(InsufficientParticipantsError):
        generate_monrad_tournament(MonradConfig(), _standings(3), is_doubles=False)
    with pytest.raises(InsufficientParticipantsError):
        generate_monrad_tournament(
            MonradConfig(), [], is_doubles=True, participants=_players(2)
        )

    singles = generate_monrad_tournament(
        MonradConfig(), [], is_doubles=False, participants=_players(4)
    )
    assert len(singles.teams) == 4
    assert len(singles.phase1[0].matches) == 2

    for count in (4, 6, 8):
        doubles = generate_monrad_tournament(
            MonradConfig(), [], is_doubles=True, participants=_players(count)
        )
        assert len(doubles.teams) == count // 2
        assert doubles.final_bracket_size == 2


def test_knockout_is_seeded_by_final_swiss_rank():
    tournament = generate_monrad_tournament(
        MonradConfig(swiss_rounds=2, final_bracket_size=4),
        _standings(8),
        is_doubles=False,
        participants=_players(8),
    )
    points = {"p05": 6, "p02": 6, "p07": 4, "p01": 3, "p03": 3}
    final_standings = [
        Standing(tournament_id="t1", user_id=s.user_id, points=points.get(s.user_id, 0))
        for s in _standings(8)
    ]

    qualifiers = get_knockout_qualifiers(tournament, final_standings)
    seeded = seed_monrad_knockout(tournament, final_standings)

    assert [t.id for t in qualifiers] == ["p02", "p05", "p07", "p01"]
    assert seeded.is_seeded
    assert not tournament.is_seeded
    first_round = [(m.team1.id, m.team2.id) for m in seeded.phase2.round_matches(1)]
    assert first_round == [("p02", "p01"), ("p05", "p07")]


def test_qualification_helpers():
    qualifiers = [
        Standing(tournament_id="t1", user_id="a", points=9),
        Standing(tournament_id="t1", user_id="b", points=6),
    ]

    assert has_qualified_for_knockout("b", qualifiers)
    assert not has_qualified_for_knockout("c", qualifiers)
    assert get_qualification_cutoff(qualifiers) == 6
    assert get_qualification_cutoff([]) == 0


def test_doubles_monrad_uses_teams():
    teams = [Team(f"p{i:02d}", f"p{i + 1:02d}") for i in range(1, 17, 2)]

    tournament = generate_monrad_tournament(
        MonradConfig(swiss_rounds=3),
        _standings(16),
        is_doubles=True,
        participants=_players(16),
        teams=teams,
    )

    assert tournament.teams == teams
    assert tournament.final_bracket_size == 4
    for match in tournament.phase1[0].matches:
        assert match.team1 in teams and match.team2 in teams
