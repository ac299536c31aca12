from slotswap.models.game_slot import SLOT_CANCELLED, SLOT_CONFIRMED
from slotswap.services.conflict_detector import find_conflicts_for_slot, find_team_conflict

EVENING = (18 * 60, 20 * 60)


def _find(session, team_id, start, end, exclude=None, game_date="2026-04-10"):
    return find_team_conflict(
        session,
        league_id="L1",
        team_id=team_id,
        game_date=game_date,
        start_minutes=start,
        end_minutes=end,
        exclude_slot_id=exclude,
    )


def test_detects_overlap_across_divisions(session, make_slot):
    booked = make_slot(division="12U", offering_team_id="X", status=SLOT_CONFIRMED, confirmed_team_id="A")

    conflict = _find(session, "A", 19 * 60, 21 * 60)

    assert conflict is not None
    assert conflict.slot_id == booked.slot_id
    assert conflict.to_dict() == {
        "teamId": "A",
        "conflict": {
            "slotId": booked.slot_id,
            "division": "12U",
            "gameDate": "2026-04-10",
            "startTime": "18:00",
            "endTime": "20:00",
            "offeringTeamId": "X",
            "confirmedTeamId": "A",
        },
    }


def test_offering_side_counts_as_involvement(session, make_slot):
    make_slot(offering_team_id="a", status=SLOT_CONFIRMED, confirmed_team_id="B")
    assert _find(session, "A", *EVENING) is not None


def test_ignores_touching_other_dates_open_and_cancelled(session, make_slot):
    make_slot(start_time="16:00", end_time="18:00", status=SLOT_CONFIRMED, confirmed_team_id="B")
    make_slot(game_date="2026-04-11", status=SLOT_CONFIRMED, confirmed_team_id="B")
    make_slot(status=SLOT_CANCELLED, confirmed_team_id="B")
    make_slot(offering_team_id="B")

    assert _find(session, "B", *EVENING) is None


def test_excluded_slot_and_other_leagues(session, make_slot):
    own = make_slot(status=SLOT_CONFIRMED, confirmed_team_id="B")
    make_slot(league_id="L2", status=SLOT_CONFIRMED, confirmed_team_id="B")

    assert _find(session, "B", *EVENING, exclude=own.slot_id) is None
    assert _find(session, "B", *EVENING) is not None


def test_malformed_rows_are_skipped(session, make_slot):
    make_slot(start_time="7pm", end_time="9pm", status=SLOT_CONFIRMED, confirmed_team_id="B")
    assert _find(session, "B", *EVENING) is None


def test_blank_team_never_conflicts(session, make_slot):
    make_slot(offering_team_id="", status=SLOT_CONFIRMED, confirmed_team_id="B")
    assert _find(session, "", *EVENING) is None


def test_both_sides_of_a_prospective_game_are_checked(session, make_slot):
    candidate = make_slot(offering_team_id="A")
    make_slot(division="12U", offering_team_id="X", status=SLOT_CONFIRMED, confirmed_team_id="A")
    make_slot(division="8U", offering_team_id="D", status=SLOT_CONFIRMED, confirmed_team_id="Y")

    conflicts = find_conflicts_for_slot(session, "L1", candidate, "D", *EVENING)

    assert [c.team_id for c in conflicts] == ["A", "D"]
