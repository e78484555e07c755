"""
Investment handlers.

Teams declare one target each (or pass). Targets claimed by more than one
team become conflicts that are settled by bidding ESOP, scoped to the
claimants. Only the winning bid is paid. Finalization moves a fixed amount
of valuation from each investor to its target.
"""

from __future__ import annotations

from ..errors import InvariantViolation
from ..queries import conflict_for_target, investment_awards
from ..state import GameState, Bid, Conflict, InvestmentStep


def start_investment(state: GameState) -> GameState:
    return state._copy_with(
        investment_step=InvestmentStep.DECLARE,
        investment_declarations={},
        conflicts=(),
    )


def declare_investment(state: GameState, team: int, target: int | None) -> GameState:
    declarations = dict(state.investment_declarations)
    declarations[team] = target
    return state._copy_with(investment_declarations=declarations)


def resolve_investment_conflicts(state: GameState) -> GameState:
    """Open a conflict for every target claimed by two or more teams."""
    claimants: dict[int, list[int]] = {}
    for investor, target in sorted(state.investment_declarations.items()):
        if target is not None:
            claimants.setdefault(target, []).append(investor)
    conflicts = tuple(
        Conflict(target=target, claimants=tuple(investors))
        for target, investors in sorted(claimants.items())
        if len(investors) > 1
    )
    step = InvestmentStep.BIDDING if conflicts else InvestmentStep.RESOLVED
    return state._copy_with(conflicts=conflicts, investment_step=step)


def _replace_conflict(state: GameState, conflict: Conflict) -> GameState:
    conflicts = tuple(conflict if c.target == conflict.target else c for c in state.conflicts)
    return state._copy_with(conflicts=conflicts)


def _claimed_conflict(state: GameState, team: int) -> Conflict:
    for conflict in state.conflicts:
        if team in conflict.claimants and not conflict.closed and not conflict.resolved:
            return conflict
    raise InvariantViolation(f"Team {team} has no open conflict")


def place_investment_bid(state: GameState, team: int, amount: float) -> GameState:
    conflict = _claimed_conflict(state, team)
    bid = Bid(team=team, amount=state.config.round_esop(amount), sequence=state.action_counter)
    return _replace_conflict(state, Conflict(
        target=conflict.target,
        claimants=conflict.claimants,
        bids=conflict.bids + (bid,),
        passed=conflict.passed,
    ))


def pass_investment_bid(state: GameState, team: int) -> GameState:
    conflict = _claimed_conflict(state, team)
    return _replace_conflict(state, Conflict(
        target=conflict.target,
        claimants=conflict.claimants,
        bids=conflict.bids,
        passed=conflict.passed + (team,),
    ))


def close_conflict(state: GameState, target: int) -> GameState:
    conflict = conflict_for_target(state, target)
    if conflict is None:
        raise InvariantViolation(f"No conflict over team {target}")
    return _replace_conflict(state, Conflict(
        target=conflict.target,
        claimants=conflict.claimants,
        bids=conflict.bids,
        passed=conflict.passed,
        closed=True,
    ))


def resolve_conflict_bids(state: GameState) -> GameState:
    """
    Award every conflict to its best bid and charge only the winner.

    Best is the highest amount, then the earliest bid, then the lowest
    slot. A conflict nobody bid on leaves its target without an investor.
    """
    config = state.config
    conflicts = []
    for conflict in state.conflicts:
        winner = None
        if conflict.bids:
            best = min(conflict.bids, key=lambda b: (-b.amount, b.sequence, b.team))
            winner = best.team
            team = state.teams[winner]
            remaining = config.round_esop(team.esop_remaining - best.amount)
            if remaining < 0:
                raise InvariantViolation(f"{team.name} would be left with negative ESOP")
            state = state.with_team(team.with_changes(
                esop_remaining=remaining,
                conflict_spend=config.round_esop(team.conflict_spend + best.amount),
            ))
        conflicts.append(Conflict(
            target=conflict.target,
            claimants=conflict.claimants,
            bids=conflict.bids,
            passed=conflict.passed,
            closed=True,
            resolved=True,
            winner=winner,
        ))
    return state._copy_with(conflicts=tuple(conflicts), investment_step=InvestmentStep.RESOLVED)


def finalize_investments(state: GameState) -> GameState:
    """Move the investment amount from every investor to its target."""
    amount = state.config.investment_amount
    for target, investor in sorted(investment_awards(state).items()):
        investing = state.teams[investor]
        moved = min(amount, investing.valuation)
        state = state.with_team(investing.with_changes(
            valuation=investing.valuation - moved,
            invested_in=target,
            investment_amount=moved,
        ))
        receiving = state.teams[target]
        state = state.with_team(receiving.with_changes(
            valuation=receiving.valuation + moved,
            investor=investor,
        ))
    return state._copy_with(investment_step=InvestmentStep.FINALIZED)
