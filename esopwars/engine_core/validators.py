"""
Validators - Decide whether an action is legal without changing anything.

Every validator checks, in order:
1. phase      - the action belongs to the current phase (PHASE_MISMATCH)
2. turn       - the actor is eligible to act now (OUT_OF_TURN)
3. resources  - budgets, caps and card existence (INSUFFICIENT_RESOURCE,
                INVALID_TARGET, EMPTY_POOL)
4. idempotence - the thing has not already happened (ALREADY_RESOLVED)

and returns the first failure as a Rejection, or None when legal.
"""

from __future__ import annotations
from typing import Callable

from .action import Action, ActionPayload, ActionType
from .config import GameConfig
from .errors import Rejection, RejectionKind
from .queries import (
    get_team, is_players_turn, current_card, can_hire, open_conflict_for,
    conflict_for_target, all_investments_declared, all_conflict_bids_placed,
)
from .state import (
    GameState, Team, Phase, SetupDeck, WildcardChoice, InvestmentStep,
)

Validator = Callable[[GameState, "int | None", ActionPayload], "Rejection | None"]


def _reject(kind: RejectionKind, message: str) -> Rejection:
    return Rejection(kind=kind, message=message)


def _phase(state: GameState, *phases: Phase) -> Rejection | None:
    if state.phase not in phases:
        expected = " or ".join(p.value for p in phases)
        return _reject(
            RejectionKind.PHASE_MISMATCH,
            f"Action requires phase {expected}, current phase is {state.phase.value}",
        )
    return None


def _team_actor(state: GameState, actor: int | None) -> tuple[Team | None, Rejection | None]:
    """Resolve the acting team; the session driver can't act for a team."""
    if actor is None:
        return None, _reject(RejectionKind.OUT_OF_TURN, "Team action submitted without a team")
    team = get_team(state, actor)
    if team is None:
        return None, _reject(RejectionKind.INVALID_TARGET, f"Unknown team slot {actor}")
    if not team.is_active:
        return None, _reject(RejectionKind.OUT_OF_TURN, f"{team.name} is disqualified")
    return team, None


def _system_actor(actor: int | None) -> Rejection | None:
    if actor is not None:
        return _reject(RejectionKind.OUT_OF_TURN, "Only the session driver may take this action")
    return None


def _check_bid_amount(
    config: GameConfig, amount: float | None, leading: float, available: float,
) -> Rejection | None:
    """Compare the bid as it will be stored, rounded to the equity precision."""
    if amount is None or isinstance(amount, bool) or not isinstance(amount, (int, float)):
        return _reject(RejectionKind.INVALID_TARGET, "Bid amount is required")
    amount = config.round_esop(amount)
    if amount <= 0:
        return _reject(RejectionKind.INSUFFICIENT_RESOURCE, "Bid must be positive")
    if amount <= leading:
        return _reject(
            RejectionKind.INSUFFICIENT_RESOURCE,
            f"Bid of {amount} must exceed the leading bid of {leading}",
        )
    if amount > available:
        return _reject(
            RejectionKind.INSUFFICIENT_RESOURCE,
            f"Bid of {amount} exceeds remaining ESOP of {available}",
        )
    return None


# =============================================================================
# Registration and setup
# =============================================================================

def validate_register_team(state, actor, payload):
    rejection = _phase(state, Phase.REGISTRATION)
    if rejection:
        return rejection
    team, rejection = _team_actor(state, actor)
    if rejection:
        return rejection
    if not is_players_turn(state, team.slot):
        return _reject(RejectionKind.OUT_OF_TURN, f"It is not {team.name}'s turn to register")

    config = state.config
    name = (payload.name or "").strip()
    if not name:
        return _reject(RejectionKind.INVALID_TARGET, "Team name is required")
    if len(name) > config.max_name_length:
        return _reject(
            RejectionKind.INVALID_TARGET,
            f"Team name must be at most {config.max_name_length} characters",
        )
    taken = {t.name.lower() for t in state.teams if t.is_registered}
    if name.lower() in taken:
        return _reject(RejectionKind.INVALID_TARGET, f"Team name '{name}' is already taken")
    problem = (payload.problem_statement or "").strip()
    if len(problem) > config.max_problem_length:
        return _reject(
            RejectionKind.INVALID_TARGET,
            f"Problem statement must be at most {config.max_problem_length} characters",
        )
    return None


def _setup_turn(state: GameState, actor: int | None) -> tuple[Team | None, Rejection | None]:
    """Shared phase and turn checks for turn-scoped setup actions."""
    rejection = _phase(state, Phase.SETUP)
    if rejection:
        return None, rejection
    team, rejection = _team_actor(state, actor)
    if rejection:
        return None, rejection
    if team.setup_locked:
        return None, _reject(RejectionKind.ALREADY_RESOLVED, f"{team.name} has locked its setup")
    if not is_players_turn(state, team.slot):
        return None, _reject(RejectionKind.OUT_OF_TURN, f"It is not {team.name}'s setup turn")
    return team, None


def validate_drop_card(state, actor, payload):
    team, rejection = _setup_turn(state, actor)
    if rejection:
        return rejection
    card = team.find_setup_card(payload.card_id)
    if card is None:
        return _reject(RejectionKind.INVALID_TARGET, f"Card {payload.card_id} is not in hand")
    if team.count_setup_cards(card.kind) <= 1:
        return _reject(
            RejectionKind.INSUFFICIENT_RESOURCE,
            f"Can't drop the last {card.kind.value} card",
        )
    if state.setup_dropped_this_turn:
        return _reject(RejectionKind.ALREADY_RESOLVED, "Already dropped a card this turn")
    return None


def validate_draw_card(state, actor, payload):
    team, rejection = _setup_turn(state, actor)
    if rejection:
        return rejection
    if not isinstance(payload.deck, SetupDeck):
        return _reject(RejectionKind.INVALID_TARGET, "Draw requires a segment or idea deck")
    if team.setup_draws_used >= state.config.setup_draw_budget:
        return _reject(
            RejectionKind.INSUFFICIENT_RESOURCE,
            f"{team.name} has used all {state.config.setup_draw_budget} draws",
        )
    pile = state.segment_deck if payload.deck is SetupDeck.SEGMENT else state.idea_deck
    if not pile:
        return _reject(RejectionKind.EMPTY_POOL, f"The {payload.deck.value} deck is empty")
    return None


def validate_skip_draw(state, actor, payload):
    _, rejection = _setup_turn(state, actor)
    return rejection


def validate_lock_setup(state, actor, payload):
    rejection = _phase(state, Phase.SETUP)
    if rejection:
        return rejection
    team, rejection = _team_actor(state, actor)
    if rejection:
        return rejection
    # A locked team's hand is gone, so this has to come before the card checks
    if team.setup_locked:
        return _reject(RejectionKind.ALREADY_RESOLVED, f"{team.name} has already locked its setup")
    segment = team.find_setup_card(payload.segment_id)
    if segment is None or segment.kind is not SetupDeck.SEGMENT:
        return _reject(RejectionKind.INVALID_TARGET, f"Segment {payload.segment_id} is not in hand")
    idea = team.find_setup_card(payload.idea_id)
    if idea is None or idea.kind is not SetupDeck.IDEA:
        return _reject(RejectionKind.INVALID_TARGET, f"Idea {payload.idea_id} is not in hand")
    return None


# =============================================================================
# Auction and secondary hire
# =============================================================================

def validate_place_bid(state, actor, payload):
    rejection = _phase(state, Phase.AUCTION, Phase.SECONDARY_HIRE)
    if rejection:
        return rejection
    team, rejection = _team_actor(state, actor)
    if rejection:
        return rejection
    if current_card(state) is None:
        return _reject(RejectionKind.EMPTY_POOL, "No employee card is up for bidding")
    if not can_hire(team, state.config):
        return _reject(
            RejectionKind.INSUFFICIENT_RESOURCE,
            f"{team.name} already holds {state.config.hire_cap} employees",
        )
    leading = state.current_bid.amount if state.current_bid else 0.0
    rejection = _check_bid_amount(state.config, payload.amount, leading, team.esop_remaining)
    if rejection:
        return rejection
    if state.phase is Phase.SECONDARY_HIRE and team.secondary_hires >= 1:
        return _reject(RejectionKind.ALREADY_RESOLVED, f"{team.name} already re-hired this round")
    return None


def _bidding_system(state: GameState, actor: int | None) -> Rejection | None:
    rejection = _phase(state, Phase.AUCTION, Phase.SECONDARY_HIRE)
    if rejection:
        return rejection
    rejection = _system_actor(actor)
    if rejection:
        return rejection
    if current_card(state) is None:
        return _reject(RejectionKind.EMPTY_POOL, "No employee card is up for bidding")
    return None


def validate_close_bidding(state, actor, payload):
    rejection = _bidding_system(state, actor)
    if rejection:
        return rejection
    if state.current_bid is None:
        return _reject(RejectionKind.INVALID_TARGET, "No bid to award")
    return None


def validate_skip_card(state, actor, payload):
    return _bidding_system(state, actor)


# =============================================================================
# Wildcard and market
# =============================================================================

def validate_select_wildcard(state, actor, payload):
    rejection = _phase(state, Phase.WILDCARD)
    if rejection:
        return rejection
    team, rejection = _team_actor(state, actor)
    if rejection:
        return rejection
    if payload.choice is not None and not isinstance(payload.choice, WildcardChoice):
        return _reject(RejectionKind.INVALID_TARGET, f"Unknown wildcard {payload.choice!r}")
    if team.slot in state.wildcard_selections:
        return _reject(RejectionKind.ALREADY_RESOLVED, f"{team.name} already chose this round")
    if payload.choice is not None and team.wildcard_used:
        return _reject(RejectionKind.ALREADY_RESOLVED, f"{team.name} has already used its wildcard")
    return None


def validate_draw_market_card(state, actor, payload):
    rejection = _phase(state, Phase.MARKET)
    if rejection:
        return rejection
    rejection = _system_actor(actor)
    if rejection:
        return rejection
    if state.active_market_card is None and not state.market_deck:
        return _reject(RejectionKind.EMPTY_POOL, "The market deck is empty")
    if state.active_market_card is not None:
        return _reject(RejectionKind.ALREADY_RESOLVED, "A market card is already in play")
    return None


def validate_apply_market_effects(state, actor, payload):
    rejection = _phase(state, Phase.MARKET)
    if rejection:
        return rejection
    rejection = _system_actor(actor)
    if rejection:
        return rejection
    if state.active_market_card is None:
        return _reject(RejectionKind.INVALID_TARGET, "Draw a market card first")
    if state.market_resolved:
        return _reject(RejectionKind.ALREADY_RESOLVED, "Market effects were already applied")
    return None


# =============================================================================
# Investment
# =============================================================================

def _investment_step(state: GameState, step: InvestmentStep) -> Rejection | None:
    rejection = _phase(state, Phase.INVESTMENT)
    if rejection:
        return rejection
    if state.investment_step is not step:
        return _reject(
            RejectionKind.PHASE_MISMATCH,
            f"Investment is in the {state.investment_step.value} step, not {step.value}",
        )
    return None


def validate_declare_investment(state, actor, payload):
    rejection = _investment_step(state, InvestmentStep.DECLARE)
    if rejection:
        return rejection
    team, rejection = _team_actor(state, actor)
    if rejection:
        return rejection
    target = payload.target
    if target is not None:
        target_team = get_team(state, target)
        if target_team is None or not target_team.is_active:
            return _reject(RejectionKind.INVALID_TARGET, f"Team {target} can't receive investment")
        if target == team.slot:
            return _reject(RejectionKind.INVALID_TARGET, "A team can't invest in itself")
    if team.slot in state.investment_declarations:
        return _reject(RejectionKind.ALREADY_RESOLVED, f"{team.name} has already declared")
    return None


def validate_resolve_investment_conflicts(state, actor, payload):
    rejection = _phase(state, Phase.INVESTMENT)
    if rejection:
        return rejection
    rejection = _system_actor(actor)
    if rejection:
        return rejection
    if state.investment_step is InvestmentStep.DECLARE and not all_investments_declared(state):
        return _reject(RejectionKind.OUT_OF_TURN, "Not every team has declared")
    if state.investment_step is not InvestmentStep.DECLARE:
        return _reject(RejectionKind.ALREADY_RESOLVED, "Conflicts were already identified")
    return None


def _conflict_claimant(state: GameState, actor: int | None):
    rejection = _investment_step(state, InvestmentStep.BIDDING)
    if rejection:
        return None, None, rejection
    team, rejection = _team_actor(state, actor)
    if rejection:
        return None, None, rejection
    conflict = open_conflict_for(state, team.slot)
    if conflict is None:
        contested = [c for c in state.conflicts if team.slot in c.claimants]
        if contested:
            return None, None, _reject(RejectionKind.ALREADY_RESOLVED, "Conflict is closed")
        return None, None, _reject(RejectionKind.INVALID_TARGET, f"{team.name} has no open conflict")
    return team, conflict, None


def validate_place_investment_bid(state, actor, payload):
    team, conflict, rejection = _conflict_claimant(state, actor)
    if rejection:
        return rejection
    leader = conflict.leading_bid
    leading = leader.amount if leader else 0.0
    rejection = _check_bid_amount(state.config, payload.amount, leading, team.esop_remaining)
    if rejection:
        return rejection
    if team.slot in conflict.passed:
        return _reject(RejectionKind.ALREADY_RESOLVED, f"{team.name} has passed on this conflict")
    return None


def validate_pass_investment_bid(state, actor, payload):
    team, conflict, rejection = _conflict_claimant(state, actor)
    if rejection:
        return rejection
    leader = conflict.leading_bid
    if leader is not None and leader.team == team.slot:
        return _reject(RejectionKind.OUT_OF_TURN, "The leading bidder can't pass")
    if team.slot in conflict.passed:
        return _reject(RejectionKind.ALREADY_RESOLVED, f"{team.name} has already passed")
    return None


def validate_close_conflict(state, actor, payload):
    rejection = _investment_step(state, InvestmentStep.BIDDING)
    if rejection:
        return rejection
    rejection = _system_actor(actor)
    if rejection:
        return rejection
    conflict = conflict_for_target(state, payload.target) if payload.target is not None else None
    if conflict is None:
        return _reject(RejectionKind.INVALID_TARGET, f"No conflict over team {payload.target}")
    if not conflict.bids:
        return _reject(RejectionKind.INVALID_TARGET, "No bid to award")
    if conflict.closed or conflict.resolved:
        return _reject(RejectionKind.ALREADY_RESOLVED, "Conflict is already closed")
    return None


def validate_resolve_conflict_bids(state, actor, payload):
    rejection = _investment_step(state, InvestmentStep.BIDDING)
    if rejection:
        return rejection
    rejection = _system_actor(actor)
    if rejection:
        return rejection
    if not all_conflict_bids_placed(state):
        return _reject(RejectionKind.OUT_OF_TURN, "Conflict bidding is still open")
    return None


def validate_finalize_investments(state, actor, payload):
    rejection = _phase(state, Phase.INVESTMENT)
    if rejection:
        return rejection
    rejection = _system_actor(actor)
    if rejection:
        return rejection
    step = state.investment_step
    if step in (InvestmentStep.DECLARE, InvestmentStep.BIDDING):
        return _reject(RejectionKind.OUT_OF_TURN, "Investment conflicts are not resolved yet")
    if step is InvestmentStep.FINALIZED:
        return _reject(RejectionKind.ALREADY_RESOLVED, "Investments were already finalized")
    return None


# =============================================================================
# Secondary and exit
# =============================================================================

def validate_drop_employee(state, actor, payload):
    rejection = _phase(state, Phase.SECONDARY_DROP)
    if rejection:
        return rejection
    team, rejection = _team_actor(state, actor)
    if rejection:
        return rejection
    if team.employee_count != state.config.hire_cap:
        return _reject(
            RejectionKind.INSUFFICIENT_RESOURCE,
            f"{team.name} must hold {state.config.hire_cap} employees to drop one",
        )
    if team.get_employee(payload.employee_id) is None:
        if any(d.employee.id == payload.employee_id for d in state.dropped_employees):
            return _reject(RejectionKind.ALREADY_RESOLVED, "Employee was already dropped")
        return _reject(RejectionKind.INVALID_TARGET, f"Employee {payload.employee_id} is not on the roster")
    if team.dropped_employee_id is not None:
        return _reject(RejectionKind.ALREADY_RESOLVED, f"{team.name} has already dropped")
    return None


def validate_draw_exit(state, actor, payload):
    rejection = _phase(state, Phase.EXIT)
    if rejection:
        return rejection
    rejection = _system_actor(actor)
    if rejection:
        return rejection
    if not state.exit_deck:
        return _reject(RejectionKind.EMPTY_POOL, "The exit deck is empty")
    if state.exit_card is not None:
        return _reject(RejectionKind.ALREADY_RESOLVED, "The exit was already drawn")
    return None


VALIDATORS: dict[ActionType, Validator] = {
    ActionType.REGISTER_TEAM: validate_register_team,
    ActionType.DROP_CARD: validate_drop_card,
    ActionType.DRAW_CARD: validate_draw_card,
    ActionType.SKIP_DRAW: validate_skip_draw,
    ActionType.LOCK_SETUP: validate_lock_setup,
    ActionType.PLACE_BID: validate_place_bid,
    ActionType.CLOSE_BIDDING: validate_close_bidding,
    ActionType.SKIP_CARD: validate_skip_card,
    ActionType.SELECT_WILDCARD: validate_select_wildcard,
    ActionType.DRAW_MARKET_CARD: validate_draw_market_card,
    ActionType.APPLY_MARKET_EFFECTS: validate_apply_market_effects,
    ActionType.DECLARE_INVESTMENT: validate_declare_investment,
    ActionType.RESOLVE_INVESTMENT_CONFLICTS: validate_resolve_investment_conflicts,
    ActionType.PLACE_INVESTMENT_BID: validate_place_investment_bid,
    ActionType.PASS_INVESTMENT_BID: validate_pass_investment_bid,
    ActionType.CLOSE_CONFLICT: validate_close_conflict,
    ActionType.RESOLVE_CONFLICT_BIDS: validate_resolve_conflict_bids,
    ActionType.FINALIZE_INVESTMENTS: validate_finalize_investments,
    ActionType.DROP_EMPLOYEE: validate_drop_employee,
    ActionType.DRAW_EXIT: validate_draw_exit,
}

_missing = set(ActionType) - set(VALIDATORS)
if _missing:
    raise RuntimeError(f"No validator for action types: {sorted(a.value for a in _missing)}")


def validate(state: GameState, action: Action) -> Rejection | None:
    """
    Validate an action against the current state.

    Returns the first Rejection, or None if the action is legal.
    """
    if state.is_game_over:
        return _reject(RejectionKind.PHASE_MISMATCH, "Game is over - no actions allowed")
    return VALIDATORS[action.action_type](state, action.actor, action.payload)
