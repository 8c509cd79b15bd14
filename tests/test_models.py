import pytest

from padelpairing.models import (
    Bracket,
    Match,
    MatchStatus,
    Participant,
    ParticipantStatus,
    Round,
    Standing,
    Team,
    TournamentConfig,
    TournamentType,
)
from padelpairing.models.pairing_history import PairingHistory
from padelpairing.models.participant import checked_in
from padelpairing.models.tournament_config import FormatSettings
from padelpairing.pairing.knockout import generate_double_elimination_bracket


def test_singles_team_uses_one_player_id():
    team = Team.single("anna")

    assert team.is_singles
    assert team.player_ids == ("anna",)
    assert team.id == "anna"
    assert team.to_list() == ["anna", "anna"]


def test_doubles_team_identity_ignores_slot_order():
    first = Team("anna", "bea")
    second = Team("bea", "anna")

    assert first.id == "anna+bea"
    assert first.key == second.key
    assert first.has_player("bea")
    assert not first.is_singles


def test_team_from_ids_rejects_three_players():
    assert Team.from_ids(["anna"]) == Team.single("anna")
    with pytest.raises(ValueError):
        Team.from_ids(["anna", "bea", "carla"])


def test_checked_in_filters_other_statuses():
    participants = [
        Participant("a", status=ParticipantStatus.CHECKED_IN),
        Participant("b"),
        Participant("c", status=ParticipantStatus.NO_SHOW),
        Participant("d", status=ParticipantStatus.DISQUALIFIED),
    ]

    assert [p.id for p in checked_in(participants)] == ["a"]


def test_resolved_winner_prefers_explicit_winner():
    match = Match(
        id="m1",
        team1=Team.single("a"),
        team2=Team.single("b"),
        team1_score=3,
        team2_score=6,
        status=MatchStatus.COMPLETED,
    )
    assert match.resolved_winner() == 2
    assert match.winning_team() == Team.single("b")
    assert match.losing_team() == Team.single("a")

    match.winner_team = 1
    assert match.resolved_winner() == 1


def test_level_scores_have_no_winner():
    match = Match(
        id="m1",
        team1=Team.single("a"),
        team2=Team.single("b"),
        team1_score=6,
        team2_score=6,
        is_draw=True,
        status=MatchStatus.COMPLETED,
    )

    assert match.resolved_winner() is None
    assert match.winning_team() is None


def test_forfeited_match_counts_as_finished():
    assert MatchStatus.FORFEITED.is_finished
    assert MatchStatus.COMPLETED.is_finished
    assert not MatchStatus.IN_PROGRESS.is_finished


def test_round_serialization_keeps_teams_and_byes():
    round_data = Round(
        id="r1",
        tournament_id="t1",
        round_number=1,
        matches=[
            Match(id="m1", team1=Team("a", "b"), team2=Team("c", "d"), court_id="c1")
        ],
        bye_ids=["e+f"],
    )

    restored = Round.from_dict(round_data.to_dict())

    assert restored.matches[0].team1 == Team("a", "b")
    assert restored.matches[0].court_id == "c1"
    assert restored.bye_ids == ["e+f"]
    assert not restored.is_complete


def test_standing_dict_reports_games_difference():
    standing = Standing(tournament_id="t1", user_id="a", games_won=14, games_lost=9)

    data = standing.to_dict()

    assert data["games_diff"] == 5
    assert Standing.from_dict(data).games_diff == 5


def test_config_defaults_and_format_settings():
    config = TournamentConfig.from_dict(
        {"type": "swiss", "format_settings": {"rounds": 4, "pairing_method": "fold"}}
    )

    assert config.type == TournamentType.SWISS
    assert config.points_per_win == 3
    assert config.points_per_draw == 1
    assert config.points_per_loss == 0
    assert config.format_settings.rounds == 4
    assert config.format_settings == FormatSettings.from_dict(
        config.format_settings.to_dict()
    )


def test_pairing_history_is_symmetric():
    history = PairingHistory()
    history.add_pairing(Team("a", "b"), Team("c", "d"))

    assert history.have_played(Team("d", "c"), Team("b", "a"))
    assert not history.have_played(Team("a", "b"), Team("e", "f"))


def test_bracket_survives_serialization():
    participants = [
        Participant(str(i), skill_level=i, status=ParticipantStatus.CHECKED_IN)
        for i in range(1, 7)
    ]
    bracket = generate_double_elimination_bracket(participants, is_doubles=False)

    restored = Bracket.from_dict(bracket.to_dict())

    assert restored.positions == bracket.positions
    assert restored.matches.keys() == bracket.matches.keys()
    assert restored.bye_ids == bracket.bye_ids
    assert restored.seeds == bracket.seeds
