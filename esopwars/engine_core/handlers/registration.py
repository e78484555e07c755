"""
Registration and setup draft handlers.

Registration is strictly in seat order. The setup draft deals each team a
segment and a few ideas, then rotates turns: on its turn a team may drop
one card and must then draw or skip. Locking a segment/idea pair is
allowed at any time and takes the team out of the rotation.
"""

from __future__ import annotations

from ..errors import InvariantViolation
from ..queries import next_setup_turn, find_setup_bonus
from ..state import GameState, SetupDeck, SetupCard


def register_team(state: GameState, team: int, name: str, problem_statement: str = "") -> GameState:
    current = state.teams[team]
    return state.with_team(current.with_changes(
        name=name.strip(),
        problem_statement=(problem_statement or "").strip(),
        is_registered=True,
    ))


def deal_setup_hands(state: GameState) -> GameState:
    """Deal every active team its opening hand and hand the turn to the first seat."""
    config = state.config
    segments = list(state.segment_deck)
    ideas = list(state.idea_deck)
    teams = []
    for team in state.teams:
        if not team.is_active:
            teams.append(team)
            continue
        hand = segments[:config.setup_segments_dealt] + ideas[:config.setup_ideas_dealt]
        segments = segments[config.setup_segments_dealt:]
        ideas = ideas[config.setup_ideas_dealt:]
        teams.append(team.with_changes(setup_hand=tuple(hand), setup_draws_used=0))

    new_state = state._copy_with(
        teams=tuple(teams),
        segment_deck=tuple(segments),
        idea_deck=tuple(ideas),
        setup_dropped_this_turn=False,
    )
    return new_state._copy_with(setup_turn=next_setup_turn(new_state, after=None))


def _end_setup_turn(state: GameState) -> GameState:
    return state._copy_with(
        setup_turn=next_setup_turn(state, after=state.setup_turn),
        setup_dropped_this_turn=False,
    )


def drop_card(state: GameState, team: int, card_id: int) -> GameState:
    current = state.teams[team]
    card = current.find_setup_card(card_id)
    if card is None:
        raise InvariantViolation(f"Card {card_id} is not in {current.name}'s hand")
    hand = tuple(c for c in current.setup_hand if c.id != card_id)
    new_state = state.with_team(current.with_changes(setup_hand=hand))
    return new_state._copy_with(
        setup_discard=state.setup_discard + (card,),
        setup_dropped_this_turn=True,
    )


def draw_card(state: GameState, team: int, deck: SetupDeck) -> GameState:
    """Draw the top card of a setup deck into the team's hand; ends the turn."""
    pile = state.segment_deck if deck is SetupDeck.SEGMENT else state.idea_deck
    if not pile:
        raise InvariantViolation(f"The {deck.value} deck is empty")
    card, rest = pile[0], pile[1:]
    current = state.teams[team]
    new_state = state.with_team(current.with_changes(
        setup_hand=current.setup_hand + (card,),
        setup_draws_used=current.setup_draws_used + 1,
    ))
    if deck is SetupDeck.SEGMENT:
        new_state = new_state._copy_with(segment_deck=rest)
    else:
        new_state = new_state._copy_with(idea_deck=rest)
    return _end_setup_turn(new_state)


def skip_draw(state: GameState, team: int) -> GameState:
    return _end_setup_turn(state)


def lock_setup(state: GameState, team: int, segment_id: int, idea_id: int) -> GameState:
    """
    Freeze a team's segment and idea.

    The rest of the hand goes to the discard. A matching setup bonus is
    stored on the team for market resolution.
    """
    current = state.teams[team]
    segment = current.find_setup_card(segment_id)
    idea = current.find_setup_card(idea_id)
    if segment is None or idea is None:
        raise InvariantViolation(f"{current.name} can't lock cards it doesn't hold")

    leftovers: tuple[SetupCard, ...] = tuple(
        c for c in current.setup_hand if c.id not in (segment_id, idea_id)
    )
    new_state = state.with_team(current.with_changes(
        setup_hand=(),
        setup_locked=True,
        locked_segment=segment,
        locked_idea=idea,
        setup_bonus=find_setup_bonus(state, segment.name, idea.name),
    ))
    new_state = new_state._copy_with(setup_discard=state.setup_discard + leftovers)
    if state.setup_turn == team:
        new_state = _end_setup_turn(new_state)
    return new_state
