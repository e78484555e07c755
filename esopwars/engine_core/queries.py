"""
Queries - Pure read-only views over GameState.

Validators, the phase controller, bots and the API all read the state
through these functions. None of them return modified state.
"""

from __future__ import annotations
from dataclasses import dataclass

from .config import GameConfig
from .state import (
    GameState, Team, Phase, EmployeeCard, MarketCard, Conflict,
    InvestmentStep, BIDDING_PHASES,
)

ENGINEERING_CATEGORY = "Engineering"
PRODUCT_CATEGORY = "Product"
SALES_CATEGORY = "Sales"
OPS_CATEGORY = "Ops"
FINANCE_CATEGORY = "Finance"
SKILL_PRECISION = 6


# =============================================================================
# Teams
# =============================================================================

def get_team(state: GameState, slot: int | None) -> Team | None:
    """Team at a slot, or None for an unknown slot."""
    if slot is None or isinstance(slot, bool) or not isinstance(slot, int):
        return None
    if 0 <= slot < len(state.teams):
        return state.teams[slot]
    return None


def active_teams(state: GameState) -> list[Team]:
    return [t for t in state.teams if t.is_active]


def all_teams_registered(state: GameState) -> bool:
    return all(t.is_registered for t in state.teams)


def registration_turn(state: GameState) -> int | None:
    """The lowest unregistered slot. Registration is strictly in seat order."""
    for team in state.teams:
        if not team.is_registered:
            return team.slot
    return None


def next_setup_turn(state: GameState, after: int | None) -> int | None:
    """
    The next team to act in the setup draft.

    Walks the seats cyclically starting after `after`, skipping locked and
    disqualified teams. Returns None once every team has locked.
    """
    count = len(state.teams)
    start = -1 if after is None else after
    for offset in range(1, count + 1):
        team = state.teams[(start + offset) % count]
        if team.is_active and not team.setup_locked:
            return team.slot
    return None


def find_setup_bonus(state: GameState, segment: str, idea: str):
    for bonus in state.setup_bonuses:
        if bonus.segment == segment and bonus.idea == idea:
            return bonus
    return None


# =============================================================================
# Hiring
# =============================================================================

def current_card(state: GameState) -> EmployeeCard | None:
    """The employee card currently up for bidding, if any."""
    if state.phase is Phase.AUCTION:
        pool = state.employee_deck
    elif state.phase is Phase.SECONDARY_HIRE:
        pool = state.secondary_pool
    else:
        return None
    if 0 <= state.current_card_index < len(pool):
        return pool[state.current_card_index]
    return None


def has_ops_hire(team: Team) -> bool:
    return any(e.category == OPS_CATEGORY for e in team.employees)


def effective_esop_cost(team: Team, amount: float, config: GameConfig) -> float:
    """ESOP a team actually pays for a winning bid of `amount`."""
    if has_ops_hire(team) and config.ops_discount:
        return config.round_esop(amount * (1 - config.ops_discount))
    return config.round_esop(amount)


def can_hire(team: Team, config: GameConfig) -> bool:
    return team.is_active and team.employee_count < config.hire_cap


def all_teams_staffed(state: GameState) -> bool:
    """Every active team holds a full roster."""
    cap = state.config.hire_cap
    return all(t.employee_count >= cap for t in active_teams(state))


def auction_finished(state: GameState) -> bool:
    return (
        state.current_card_index >= len(state.employee_deck)
        or all_teams_staffed(state)
    )


def expected_esop_remaining(team: Team, config: GameConfig) -> float:
    return config.round_esop(
        config.initial_esop - team.esop_spent - team.conflict_spend - team.forfeited_esop
    )


def esop_ledger_balanced(team: Team, config: GameConfig) -> bool:
    """Remaining ESOP agrees with what the team has paid out."""
    tolerance = 10 ** -config.esop_precision
    return abs(expected_esop_remaining(team, config) - team.esop_remaining) < tolerance


# =============================================================================
# Market
# =============================================================================

def clamp_skill(value: float) -> float:
    return round(min(1.0, max(0.0, value)), SKILL_PRECISION)


def category_count(team: Team, category: str) -> int:
    return sum(1 for e in team.employees if e.category == category)


def _absorb(modifier: float, ratio: float) -> float:
    """Shrink a penalty by ratio; bonuses pass through."""
    return modifier * (1 - ratio) if modifier < 0 else modifier


def crash_shielded(team: Team, card: MarketCard | None, config: GameConfig) -> bool:
    """A Finance hire softens every penalty of the crash card."""
    return (
        card is not None
        and card.name == config.crash_card
        and category_count(team, FINANCE_CATEGORY) > 0
    )


def hard_skill_modifier(
    team: Team, category: str, card: MarketCard | None, config: GameConfig,
) -> float:
    """Market modifier plus any setup bonus for a category."""
    modifier = card.hard_skill_modifiers.get(category, 0.0) if card else 0.0
    if crash_shielded(team, card, config):
        modifier = _absorb(modifier, config.crash_shield_ratio)
    if team.setup_bonus is not None and team.setup_bonus.category == category:
        modifier += team.setup_bonus.modifier
    return modifier


def soft_skill_modifier(
    team: Team, skill: str, card: MarketCard | None, config: GameConfig,
) -> float:
    modifier = card.soft_skill_modifiers.get(skill, 0.0) if card else 0.0
    if crash_shielded(team, card, config):
        modifier = _absorb(modifier, config.crash_shield_ratio)
    if category_count(team, PRODUCT_CATEGORY) > 0:
        modifier = _absorb(modifier, config.soft_skill_shield_ratio)
    return modifier


def adjusted_hard_skill(
    team: Team, employee: EmployeeCard, card: MarketCard | None, config: GameConfig,
) -> float:
    return clamp_skill(employee.hard_skill + hard_skill_modifier(team, employee.category, card, config))


def adjusted_soft_skills(
    team: Team, employee: EmployeeCard, card: MarketCard | None, config: GameConfig,
) -> dict[str, float]:
    return {
        skill: clamp_skill(value + soft_skill_modifier(team, skill, card, config))
        for skill, value in employee.soft_skills.items()
    }


def team_skill_total(team: Team, card: MarketCard | None, config: GameConfig) -> float:
    """Sum of every clamped hard and soft skill on the roster under a market card."""
    total = 0.0
    for hired in team.employees:
        total += adjusted_hard_skill(team, hired.card, card, config)
        total += sum(adjusted_soft_skills(team, hired.card, card, config).values())
    return round(total, SKILL_PRECISION)


def market_growth_rate(team: Team, card: MarketCard | None, config: GameConfig) -> float:
    """
    Fraction a valuation moves by under a market card.

    The roster's skill total sets the base rate. Two or more Sales hires
    add a flat synergy bonus, and each Engineering hire adds to it under
    the scaling card.
    """
    rate = team_skill_total(team, card, config) * config.skill_growth_factor
    if category_count(team, SALES_CATEGORY) >= config.sales_synergy_min:
        rate += config.sales_synergy_bonus
    if card is not None and card.name == config.scaling_card:
        rate += config.engineering_scaling_bonus * category_count(team, ENGINEERING_CATEGORY)
    return round(rate, SKILL_PRECISION)


def market_leader(state: GameState) -> Team | None:
    """Highest-valued active team; ties go to the lowest slot."""
    teams = active_teams(state)
    if not teams:
        return None
    return max(teams, key=lambda t: (t.valuation, -t.slot))


# =============================================================================
# Investment
# =============================================================================

def investment_targets(state: GameState, slot: int) -> list[int]:
    """Slots a team may declare an investment in."""
    return [t.slot for t in active_teams(state) if t.slot != slot]


def all_investments_declared(state: GameState) -> bool:
    return all(t.slot in state.investment_declarations for t in active_teams(state))


def conflict_for_target(state: GameState, target: int) -> Conflict | None:
    for conflict in state.conflicts:
        if conflict.target == target:
            return conflict
    return None


def open_conflict_for(state: GameState, slot: int) -> Conflict | None:
    """The unclosed conflict a team is a claimant in."""
    for conflict in state.conflicts:
        if not conflict.closed and not conflict.resolved and slot in conflict.claimants:
            return conflict
    return None


def conflict_settled(conflict: Conflict) -> bool:
    """No further bids can change the outcome of a conflict."""
    if conflict.resolved or conflict.closed:
        return True
    leader = conflict.leading_bid
    waiting = [
        c for c in conflict.claimants
        if c not in conflict.passed and (leader is None or c != leader.team)
    ]
    return not waiting


def all_conflict_bids_placed(state: GameState) -> bool:
    return all(conflict_settled(c) for c in state.conflicts)


def investment_awards(state: GameState) -> dict[int, int]:
    """Investor slot for each target that ends up with an investor."""
    claimants: dict[int, list[int]] = {}
    for investor, target in sorted(state.investment_declarations.items()):
        if target is not None:
            claimants.setdefault(target, []).append(investor)
    awards: dict[int, int] = {}
    for target, investors in claimants.items():
        if len(investors) == 1:
            awards[target] = investors[0]
            continue
        conflict = conflict_for_target(state, target)
        if conflict is not None and conflict.winner is not None:
            awards[target] = conflict.winner
    return awards


# =============================================================================
# Secondary
# =============================================================================

def all_employees_dropped(state: GameState) -> bool:
    """Every active team has released one employee."""
    return all(t.dropped_employee_id is not None for t in active_teams(state))


def employee_value(employee: EmployeeCard) -> float:
    """Raw worth of an employee: hard skill plus every soft skill."""
    return round(employee.hard_skill + sum(employee.soft_skills.values()), SKILL_PRECISION)


# =============================================================================
# Turn order and phase completion
# =============================================================================

def is_players_turn(state: GameState, slot: int) -> bool:
    """
    Whether a team is eligible to act in the current phase.

    Registration and setup are turn-scoped; the other phases let every
    eligible team act in parallel.
    """
    team = get_team(state, slot)
    if team is None or not team.is_active:
        return False
    phase = state.phase
    if phase is Phase.REGISTRATION:
        return registration_turn(state) == slot
    if phase is Phase.SETUP:
        return not team.setup_locked and state.setup_turn == slot
    if phase in BIDDING_PHASES:
        if current_card(state) is None or not can_hire(team, state.config):
            return False
        return phase is Phase.AUCTION or team.secondary_hires == 0
    if phase is Phase.WILDCARD:
        return slot not in state.wildcard_selections
    if phase is Phase.INVESTMENT:
        if state.investment_step is InvestmentStep.DECLARE:
            return slot not in state.investment_declarations
        if state.investment_step is InvestmentStep.BIDDING:
            conflict = open_conflict_for(state, slot)
            return conflict is not None and slot not in conflict.passed
        return False
    if phase is Phase.SECONDARY_DROP:
        return team.dropped_employee_id is None and team.employee_count == state.config.hire_cap
    return False


def wildcard_round_needed(state: GameState) -> bool:
    """Some active team still holds an unused wildcard."""
    return any(not t.wildcard_used for t in active_teams(state))


def _wildcard_complete(state: GameState) -> bool:
    eligible = [t for t in active_teams(state) if not t.wildcard_used]
    return all(t.slot in state.wildcard_selections for t in eligible)


_COMPLETION = {
    Phase.REGISTRATION: all_teams_registered,
    Phase.SETUP: lambda s: all(t.setup_locked for t in active_teams(s)),
    Phase.AUCTION: auction_finished,
    Phase.WILDCARD: _wildcard_complete,
    Phase.MARKET: lambda s: s.market_resolved,
    Phase.INVESTMENT: lambda s: s.investment_step is InvestmentStep.FINALIZED,
    Phase.SECONDARY_DROP: all_employees_dropped,
    Phase.SECONDARY_HIRE: lambda s: s.secondary_pool_populated and all_teams_staffed(s),
    Phase.EXIT: lambda s: s.exit_card is not None,
    Phase.WINNER: lambda s: False,
}

_missing = set(Phase) - set(_COMPLETION)
if _missing:
    raise RuntimeError(f"No completion predicate for phases: {sorted(p.value for p in _missing)}")


def is_phase_complete(state: GameState) -> bool:
    """Whether the current phase's exit condition holds."""
    return _COMPLETION[state.phase](state)


# =============================================================================
# Winners
# =============================================================================

@dataclass(frozen=True)
class Standing:
    """One team's place in a ranking."""
    team: int
    name: str
    score: float


@dataclass(frozen=True)
class Winners:
    """
    Final rankings.

    founder_ranking orders teams by final valuation, employer_ranking by
    the wealth their employees' equity is worth, investor_ranking by the
    return multiple on the stake each investing team bought.
    """
    founder_ranking: tuple[Standing, ...]
    employer_ranking: tuple[Standing, ...]
    investor_ranking: tuple[Standing, ...]

    @property
    def founder(self) -> Standing | None:
        return self.founder_ranking[0] if self.founder_ranking else None

    @property
    def employer(self) -> Standing | None:
        return self.employer_ranking[0] if self.employer_ranking else None

    @property
    def investor(self) -> Standing | None:
        return self.investor_ranking[0] if self.investor_ranking else None

    @property
    def same_team(self) -> bool:
        return (
            self.founder is not None
            and self.employer is not None
            and self.founder.team == self.employer.team
        )


def employee_payout(team: Team) -> float:
    """What the roster's bid equity is worth at the team's valuation."""
    return sum(e.bid_amount / 100 * team.valuation for e in team.employees)


def investor_return(state: GameState, team: Team) -> float:
    """Multiple earned on an investment: stake value over the amount invested."""
    if team.invested_in is None or not team.investment_amount:
        return 0.0
    target = state.teams[team.invested_in]
    return target.valuation * state.config.investor_equity / team.investment_amount


def _rank(teams: list[Team], scores: dict[int, float]) -> tuple[Standing, ...]:
    ordered = sorted(teams, key=lambda t: (-scores[t.slot], t.slot))
    return tuple(Standing(team=t.slot, name=t.name, score=scores[t.slot]) for t in ordered)


def get_winners(state: GameState) -> Winners | None:
    """Rankings once the exit has been drawn, otherwise None."""
    if state.exit_card is None:
        return None
    teams = active_teams(state)
    founders = {t.slot: float(t.valuation) for t in teams}
    employers = {t.slot: employee_payout(t) for t in teams}
    investors = {t.slot: investor_return(state, t) for t in teams if t.invested_in is not None}
    return Winners(
        founder_ranking=_rank(teams, founders),
        employer_ranking=_rank(teams, employers),
        investor_ranking=_rank([t for t in teams if t.slot in investors], investors),
    )
