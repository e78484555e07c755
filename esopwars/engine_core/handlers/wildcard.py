"""
Wildcard handlers.

Each team may play one wildcard in the whole game. Choices are collected
per round and turned into the team's active modifier when the wildcard
phase closes.
"""

from __future__ import annotations

from ..state import GameState, WildcardChoice


def select_wildcard(state: GameState, team: int, choice: WildcardChoice | None) -> GameState:
    selections = dict(state.wildcard_selections)
    selections[team] = choice
    return state._copy_with(wildcard_selections=selections)


def apply_wildcards(state: GameState) -> GameState:
    """Consume this round's choices: mark them used and arm them for the market."""
    teams = []
    for team in state.teams:
        choice = state.wildcard_selections.get(team.slot)
        if not team.is_active or choice is None:
            teams.append(team.with_changes(wildcard_active=None))
            continue
        teams.append(team.with_changes(wildcard_used=True, wildcard_active=choice))
    return state.with_teams(teams)._copy_with(wildcard_selections={})
