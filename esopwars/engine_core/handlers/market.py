"""
Market round handlers.

A round draws one market card and resolves it in three passes:
1. apply_market_effects - grow or shrink each valuation by the roster's skills and category perks
2. apply_wildcard_modifiers - double a gain or shield a loss
3. apply_market_leader_bonus - reward the single highest valuation

Each pass is a pure function so the order can be tested on its own.
"""

from __future__ import annotations

from ..errors import InvariantViolation
from ..queries import market_growth_rate, market_leader
from ..state import GameState, RoundPerformance, WildcardChoice


def start_market_round(state: GameState) -> GameState:
    return state._copy_with(
        market_round=state.market_round + 1,
        active_market_card=None,
        market_resolved=False,
        round_performance=(),
    )


def draw_market_card(state: GameState) -> GameState:
    if not state.market_deck:
        raise InvariantViolation("The market deck is empty")
    return state._copy_with(
        active_market_card=state.market_deck[0],
        market_deck=state.market_deck[1:],
    )


def apply_market_effects(state: GameState) -> GameState:
    """Move every active valuation by its growth rate under the active card."""
    card = state.active_market_card
    if card is None:
        raise InvariantViolation("No market card in play")
    teams = []
    performance = []
    for team in state.teams:
        if not team.is_active:
            teams.append(team)
            continue
        previous = team.valuation
        new_valuation = round(previous * (1 + market_growth_rate(team, card, state.config)))
        change = new_valuation - previous
        teams.append(team.with_changes(
            previous_valuation=previous,
            valuation=new_valuation,
            last_change=change,
        ))
        performance.append(RoundPerformance(
            team=team.slot,
            previous_valuation=previous,
            market_change=change,
            change_after_wildcard=change,
            new_valuation=new_valuation,
        ))
    return state.with_teams(teams)._copy_with(round_performance=tuple(performance))


def apply_wildcard_modifiers(state: GameState) -> GameState:
    """Apply each team's armed wildcard to the change it just took, then disarm it."""
    rows = {row.team: row for row in state.round_performance}
    teams = []
    for team in state.teams:
        if not team.is_active:
            teams.append(team)
            continue
        choice = team.wildcard_active
        change = team.last_change
        if choice is WildcardChoice.DOUBLE and change > 0:
            change *= 2
        elif choice is WildcardChoice.SHIELD and change < 0:
            change = 0
        valuation = team.previous_valuation + change
        teams.append(team.with_changes(valuation=valuation, last_change=change, wildcard_active=None))
        if team.slot in rows:
            row = rows[team.slot]
            rows[team.slot] = RoundPerformance(
                team=row.team,
                previous_valuation=row.previous_valuation,
                market_change=row.market_change,
                wildcard=choice,
                change_after_wildcard=change,
                new_valuation=valuation,
            )
    performance = tuple(rows[r.team] for r in state.round_performance)
    return state.with_teams(teams)._copy_with(round_performance=performance)


def apply_market_leader_bonus(state: GameState) -> GameState:
    leader = market_leader(state)
    teams = [t.with_changes(is_market_leader=False) for t in state.teams]
    if leader is None:
        return state.with_teams(teams)

    bonus = round(leader.valuation * state.config.market_leader_bonus)
    teams[leader.slot] = leader.with_changes(
        valuation=leader.valuation + bonus,
        is_market_leader=True,
        market_leader_count=leader.market_leader_count + 1,
    )
    performance = tuple(
        RoundPerformance(
            team=row.team,
            previous_valuation=row.previous_valuation,
            market_change=row.market_change,
            wildcard=row.wildcard,
            change_after_wildcard=row.change_after_wildcard,
            leader_bonus=bonus,
            new_valuation=row.new_valuation + bonus,
        ) if row.team == leader.slot else row
        for row in state.round_performance
    )
    return state.with_teams(teams)._copy_with(round_performance=performance)


def resolve_market(state: GameState) -> GameState:
    """Run the three resolution passes and close the round."""
    card = state.active_market_card
    state = apply_market_effects(state)
    state = apply_wildcard_modifiers(state)
    state = apply_market_leader_bonus(state)
    return state._copy_with(
        used_market_cards=state.used_market_cards + (card,),
        market_resolved=True,
    )
