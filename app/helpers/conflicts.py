from app.models import JudgeTeamConflict

def conflicting_registration_ids(judge_profile_id: int, tournament_id: int, registration_ids) -> set:
    """
    Registration ids from `registration_ids` the judge is conflicted with in
    this tournament.
    """
    wanted = {rid for rid in registration_ids if rid is not None}
    if not wanted:
        return set()

    rows = (
        JudgeTeamConflict.query
        .filter(
            JudgeTeamConflict.judge_profile_id == judge_profile_id,
            JudgeTeamConflict.tournament_id == tournament_id,
            JudgeTeamConflict.registration_id.in_(wanted),
        )
        .all()
    )
    return {c.registration_id for c in rows}

def judge_has_conflict(judge_profile_id: int, pairing) -> bool:
    return bool(
        conflicting_registration_ids(
            judge_profile_id,
            pairing.tournament_id,
            (pairing.aff_registration_id, pairing.neg_registration_id),
        )
    )
