import pytest

from padelpairing.exceptions import UnresolvablePairingError
from padelpairing.models import (
    Match,
    MatchStatus,
    PairingMethod,
    Participant,
    ParticipantStatus,
    Standing,
    Team,
)
from padelpairing.pairing.swiss import (
    SwissRoundConfig,
    calculate_swiss_rounds,
    has_played_before,
    generate_swiss_round,
    select_bye,
    validate_swiss_round,
)


def _players(ids, skills=True):
    count = len(ids)
    return [
        Participant(
            id=pid,
            skill_level=float(count - i) if skills else None,
            status=ParticipantStatus.CHECKED_IN,
        )
        for i, pid in enumerate(ids)
    ]


def _played(match_id, team1, team2, round_number=1):
    return Match(
        id=match_id,
        round_number=round_number,
        team1=team1,
        team2=team2,
        team1_score=6,
        team2_score=3,
        status=MatchStatus.COMPLETED,
    )


def _points(table):
    return [
        Standing(tournament_id="t1", user_id=user_id, points=points)
        for user_id, points in table.items()
    ]


def _ids(result):
    return [(m.team1.id, m.team2.id) for m in result.matches]


def test_round_one_slide_pairs_top_half_against_bottom_half():
    participants = _players(["p1", "p2", "p3", "p4", "p5", "p6"])

    result = generate_swiss_round(
        SwissRoundConfig(round_number=1, participants=participants),
        is_doubles=False,
    )

    assert _ids(result) == [("p1", "p4"), ("p2", "p5"), ("p3", "p6")]
    assert result.byes == []


def test_round_one_fold_pairs_first_against_last():
    participants = _players(["p1", "p2", "p3", "p4", "p5", "p6"])

    result = generate_swiss_round(
        SwissRoundConfig(
            round_number=1,
            participants=participants,
            pairing_method=PairingMethod.FOLD,
        ),
        is_doubles=False,
    )

    assert _ids(result) == [("p1", "p6"), ("p2", "p5"), ("p3", "p4")]


def test_round_one_accelerated_splits_the_field():
    participants = _players([f"p{i}" for i in range(1, 9)])

    result = generate_swiss_round(
        SwissRoundConfig(
            round_number=1,
            participants=participants,
            pairing_method=PairingMethod.ACCELERATED,
        ),
        is_doubles=False,
    )

    assert _ids(result) == [("p1", "p3"), ("p2", "p4"), ("p5", "p7"), ("p6", "p8")]


def test_unrated_round_one_is_reproducible_with_a_seed():
    participants = _players([f"p{i}" for i in range(1, 11)], skills=False)

    first = generate_swiss_round(
        SwissRoundConfig(round_number=1, participants=participants, seed=7),
        is_doubles=False,
    )
    second = generate_swiss_round(
        SwissRoundConfig(round_number=1, participants=participants, seed=7),
        is_doubles=False,
    )

    assert _ids(first) == _ids(second)


def test_later_round_avoids_rematches():
    participants = _players(["a", "b", "c", "d"])
    a, b, c, d = (Team.single(pid) for pid in "abcd")
    history = [_played("m1", a, b), _played("m2", c, d)]

    result = generate_swiss_round(
        SwissRoundConfig(
            round_number=2,
            participants=participants,
            standings=_points({"a": 3, "c": 3, "b": 0, "d": 0}),
            previous_matches=history,
        ),
        is_doubles=False,
    )

    assert _ids(result) == [("a", "c"), ("b", "d")]
    assert result.repeat_pairings == []


def test_has_played_before_ignores_slot_order():
    a, b, c = (Team.single(pid) for pid in "abc")
    history = [_played("m1", a, b)]

    assert has_played_before(a, b, history)
    assert has_played_before(b, a, history)
    assert not has_played_before(a, c, history)


def test_no_rematch_over_several_rounds():
    ids = [f"p{i}" for i in range(1, 9)]
    participants = _players(ids)
    matches = []
    points = {pid: 0 for pid in ids}

    for round_number in range(1, 5):
        result = generate_swiss_round(
            SwissRoundConfig(
                round_number=round_number,
                participants=participants,
                standings=_points(points),
                previous_matches=matches,
                allow_repeat_pairings=False,
            ),
            is_doubles=False,
        )
        assert validate_swiss_round(result.matches, matches).warnings == []
        for match in result.matches:
            played = _played(match.id, match.team1, match.team2, round_number)
            points[match.team1.id] += 3
            matches.append(played)

    pairs = [frozenset({m.team1.id, m.team2.id}) for m in matches]
    assert len(pairs) == len(set(pairs)) == 16


def test_forced_rematch_is_reported():
    participants = _players(["a", "b", "c", "d"])
    a, b, c, d = (Team.single(pid) for pid in "abcd")
    history = [
        _played("m1", a, b, 1),
        _played("m2", c, d, 1),
        _played("m3", a, c, 2),
        _played("m4", b, d, 2),
        _played("m5", a, d, 3),
        _played("m6", b, c, 3),
    ]
    config = SwissRoundConfig(
        round_number=4,
        participants=participants,
        standings=_points({"a": 9, "b": 6, "c": 3, "d": 0}),
        previous_matches=history,
    )

    result = generate_swiss_round(config, is_doubles=False)

    assert _ids(result) == [("a", "b"), ("c", "d")]
    assert result.repeat_pairings == [("a", "b"), ("c", "d")]

    config.allow_repeat_pairings = False
    with pytest.raises(UnresolvablePairingError):
        generate_swiss_round(config, is_doubles=False)


def test_relaxation_starts_with_the_lowest_ranked_units():
    participants = _players(["a", "b", "c", "d"])
    a, b, c, d = (Team.single(pid) for pid in "abcd")
    # a can only meet b, which leaves c and d with a rematch
    history = [
        _played("m1", a, c, 1),
        _played("m2", b, d, 1),
        _played("m3", a, d, 2),
        _played("m4", c, d, 2),
    ]

    result = generate_swiss_round(
        SwissRoundConfig(
            round_number=3,
            participants=participants,
            standings=_points({"a": 6, "b": 3, "c": 3, "d": 0}),
            previous_matches=history,
        ),
        is_doubles=False,
    )

    assert _ids(result) == [("a", "b"), ("c", "d")]
    assert result.repeat_pairings == [("c", "d")]


def test_bye_goes_to_lowest_ranked_without_previous_bye():
    participants = _players(["a", "b", "c", "d", "e"])

    result = generate_swiss_round(
        SwissRoundConfig(
            round_number=2,
            participants=participants,
            standings=_points({"a": 6, "b": 3, "c": 3, "d": 0, "e": 0}),
            previous_bye_ids=["e"],
        ),
        is_doubles=False,
    )

    assert result.bye_ids == ["d"]
    assert len(result.matches) == 2
    assert all("d" not in m.player_ids for m in result.matches)


def test_select_bye_falls_back_to_last_unit():
    ranked = [Team.single("a"), Team.single("b")]

    assert select_bye(ranked, ["a", "b"]) == Team.single("b")
    assert select_bye(ranked, ["b"]) == Team.single("a")


def test_doubles_partnerships_are_kept_between_rounds():
    participants = _players(["a", "b", "c", "d", "e", "f", "g", "h"])
    round_one = generate_swiss_round(
        SwissRoundConfig(round_number=1, participants=participants),
        is_doubles=True,
    )
    teams = {m.team1.key for m in round_one.matches} | {
        m.team2.key for m in round_one.matches
    }
    played = [_played(m.id, m.team1, m.team2) for m in round_one.matches]

    round_two = generate_swiss_round(
        SwissRoundConfig(
            round_number=2,
            participants=participants,
            standings=_points({pid: 0 for pid in "abcdefgh"}),
            previous_matches=played,
        ),
        is_doubles=True,
    )

    for match in round_two.matches:
        assert match.team1.key in teams
        assert match.team2.key in teams


def test_validation_flags_double_appearances():
    a, b, c = (Team.single(pid) for pid in "abc")
    matches = [Match(id="m1", team1=a, team2=b), Match(id="m2", team1=a, team2=c)]

    result = validate_swiss_round(matches, [])

    assert not result.valid
    assert "a" in result.errors[0]


def test_recommended_round_counts():
    assert calculate_swiss_rounds(3) == 3
    assert calculate_swiss_rounds(4) == 5
    assert calculate_swiss_rounds(64) == 6
    assert calculate_swiss_rounds(500) == 7
