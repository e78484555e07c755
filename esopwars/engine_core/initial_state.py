"""
Initial state - Build a fresh GameState from a card catalog.

The catalog supplies the content; this module only decides how much of it
a given table size uses and shuffles it with the session seed.
"""

from __future__ import annotations
import random
import uuid
from collections import defaultdict

from .config import GameConfig
from .randomness import new_seed, seeded_rng
from .state import CardCatalog, EmployeeCard, GameState, Team

MIN_TEAMS = 2


def build_employee_deck(
    catalog: CardCatalog,
    team_count: int,
    rng: random.Random,
) -> tuple[EmployeeCard, ...]:
    """
    Pick and shuffle the auction deck for a table size.

    The catalog's distribution names how many cards of each category to
    take; table sizes it doesn't list get the whole employee table.
    """
    distribution = catalog.employee_distribution.get(team_count)
    if distribution is None:
        cards = list(catalog.employees)
    else:
        by_category: dict[str, list[EmployeeCard]] = defaultdict(list)
        for card in catalog.employees:
            by_category[card.category].append(card)
        cards = []
        for category, count in distribution.items():
            available = list(by_category[category])
            rng.shuffle(available)
            cards.extend(available[:count])
    rng.shuffle(cards)
    return tuple(cards)


def create_initial_state(
    catalog: CardCatalog,
    team_count: int,
    config: GameConfig | None = None,
    bot_slots: tuple[int, ...] | list[int] = (),
    seed: int | None = None,
    game_id: str | None = None,
) -> GameState:
    """
    Create a game in the registration phase.

    Args:
        catalog: Card content and team seat definitions
        team_count: Number of teams, from 2 to the number of seats
        config: Rules for the session, defaults to GameConfig()
        bot_slots: Seats played by bots
        seed: Seed for every shuffle and draw; a fresh one if omitted
        game_id: Identifier, a UUID if omitted
    """
    config = config or GameConfig()
    if not MIN_TEAMS <= team_count <= len(catalog.team_slots):
        raise ValueError(
            f"team_count must be between {MIN_TEAMS} and {len(catalog.team_slots)}, got {team_count}"
        )
    for slot in bot_slots:
        if not 0 <= slot < team_count:
            raise ValueError(f"Bot slot {slot} is outside the table")

    seed = new_seed() if seed is None else seed
    rng = seeded_rng(seed, "init")

    teams = tuple(
        Team(
            slot=index,
            name=seat.name,
            color=seat.color,
            esop_remaining=config.initial_esop,
            valuation=config.initial_valuation,
            previous_valuation=config.initial_valuation,
            is_bot=index in bot_slots,
        )
        for index, seat in enumerate(catalog.team_slots[:team_count])
    )

    employee_deck = build_employee_deck(catalog, team_count, rng)
    market_deck = list(catalog.market_cards)
    segments = list(catalog.segments)
    ideas = list(catalog.ideas)
    for pile in (market_deck, segments, ideas):
        rng.shuffle(pile)

    return GameState(
        game_id=game_id or str(uuid.uuid4()),
        config=config,
        teams=teams,
        random_seed=seed,
        employee_deck=employee_deck,
        reserve_employees=tuple(catalog.reserve_employees),
        segment_deck=tuple(segments),
        idea_deck=tuple(ideas),
        setup_bonuses=tuple(catalog.setup_bonuses),
        market_deck=tuple(market_deck),
        exit_deck=tuple(catalog.exit_cards),
    )
