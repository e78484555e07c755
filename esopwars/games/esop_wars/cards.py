"""
ESOP Wars Cards - The standard card tables.

Card structure:
- Employees: category, hard skill (0-1) and a few soft skills (0-1)
- Market events: per-category hard modifiers and per-skill soft modifiers
- Exits: a valuation multiplier
- Setup: segment and idea cards, and the pairs that grant a skill bonus

Setup card ids are unique across both decks: segments 1-18, product
ideas 101-116, service ideas 201-216.
"""

from ...engine_core.state import (
    EmployeeCard,
    MarketCard,
    ExitCard,
    SetupCard,
    SetupBonus,
    SetupDeck,
    TeamSlot,
    CardCatalog,
)

ENGINEERING = "Engineering"
PRODUCT = "Product"
SALES = "Sales"
OPS = "Ops"
FINANCE = "Finance"

CATEGORIES = (ENGINEERING, PRODUCT, SALES, OPS, FINANCE)

SOFT_SKILLS = (
    "Resilience",
    "Communication",
    "Pressure Handling",
    "Leadership",
    "Adaptability",
    "Problem Solving",
    "Collaboration",
    "Initiative",
    "Emotional Intelligence",
    "Strategic Thinking",
)


def _employee(id, name, role, category, hard_skill, **soft) -> EmployeeCard:
    """Build an employee; soft skill keywords use underscores for spaces."""
    skills = {key.replace("_", " "): value for key, value in soft.items()}
    return EmployeeCard(id=id, name=name, role=role, category=category,
                        hard_skill=hard_skill, soft_skills=skills)


def _market(id, name, description, hard, soft) -> MarketCard:
    """Build a market card from hard modifiers in CATEGORIES order and soft in SOFT_SKILLS order."""
    return MarketCard(
        id=id,
        name=name,
        description=description,
        hard_skill_modifiers=dict(zip(CATEGORIES, hard)),
        soft_skill_modifiers=dict(zip(SOFT_SKILLS, soft)),
    )


# =============================================================================
# Employees
# =============================================================================

EMPLOYEES: tuple[EmployeeCard, ...] = (
    _employee(1, "Priya Sharma", "Backend Engineer", ENGINEERING, 0.7,
              Resilience=0.6, Problem_Solving=0.8),
    _employee(2, "Arjun Patel", "Frontend Developer", ENGINEERING, 0.6,
              Adaptability=0.7, Collaboration=0.6),
    _employee(3, "Kavya Reddy", "DevOps Engineer", ENGINEERING, 0.8,
              Pressure_Handling=0.8, Initiative=0.6),
    _employee(4, "Rohan Mehta", "Data Engineer", ENGINEERING, 0.65,
              Strategic_Thinking=0.5, Problem_Solving=0.7),
    _employee(5, "Ananya Krishnan", "Product Manager", PRODUCT, 0.75,
              Communication=0.8, Leadership=0.6, Strategic_Thinking=0.7),
    _employee(6, "Vikram Singh", "UX Designer", PRODUCT, 0.6,
              Adaptability=0.7, Emotional_Intelligence=0.65),
    _employee(7, "Meera Iyer", "Product Analyst", PRODUCT, 0.55,
              Problem_Solving=0.7, Collaboration=0.6),
    _employee(8, "Aditya Nair", "Growth PM", PRODUCT, 0.7,
              Initiative=0.8, Strategic_Thinking=0.6),
    _employee(9, "Neha Gupta", "Sales Lead", SALES, 0.8,
              Communication=0.9, Emotional_Intelligence=0.8),
    _employee(10, "Rahul Verma", "Account Executive", SALES, 0.6,
              Resilience=0.8, Initiative=0.7),
    _employee(11, "Shreya Joshi", "Business Development", SALES, 0.65,
              Communication=0.7, Collaboration=0.65),
    _employee(12, "Karthik Rao", "Enterprise Sales", SALES, 0.75,
              Pressure_Handling=0.6, Strategic_Thinking=0.7),
    _employee(13, "Divya Menon", "Operations Manager", OPS, 0.7,
              Resilience=0.7, Adaptability=0.6, Collaboration=0.65),
    _employee(14, "Amit Kumar", "Supply Chain Lead", OPS, 0.65,
              Pressure_Handling=0.8, Problem_Solving=0.7),
    _employee(15, "Pooja Desai", "Customer Success", OPS, 0.6,
              Communication=0.8, Emotional_Intelligence=0.75),
    _employee(16, "Sanjay Kapoor", "Finance Manager", FINANCE, 0.75,
              Pressure_Handling=0.7, Strategic_Thinking=0.8),
    _employee(17, "Ritu Agarwal", "Financial Analyst", FINANCE, 0.7,
              Problem_Solving=0.6, Adaptability=0.5),
    _employee(18, "Varun Bhatia", "Accounts Lead", FINANCE, 0.55,
              Communication=0.6, Collaboration=0.7),
)

# Held back from the auction; they only enter the secondary pool.
RESERVE_EMPLOYEES: tuple[EmployeeCard, ...] = (
    _employee(19, "Tanvi Shah", "Full Stack Developer", ENGINEERING, 0.85,
              Adaptability=0.8, Problem_Solving=0.85, Initiative=0.7),
    _employee(20, "Nikhil Saxena", "Head of Sales", SALES, 0.9,
              Leadership=0.8, Communication=0.9, Emotional_Intelligence=0.75),
    _employee(21, "Ishita Malhotra", "Strategy Lead", PRODUCT, 0.8,
              Leadership=0.7, Strategic_Thinking=0.9, Collaboration=0.65),
)

# Auction deck make-up per table size. Five or more teams use all of EMPLOYEES.
EMPLOYEE_DISTRIBUTION: dict[int, dict[str, int]] = {
    2: {ENGINEERING: 2, PRODUCT: 2, SALES: 2, OPS: 1, FINANCE: 1},
    3: {ENGINEERING: 3, PRODUCT: 3, SALES: 2, OPS: 2, FINANCE: 2},
    4: {ENGINEERING: 4, PRODUCT: 4, SALES: 3, OPS: 3, FINANCE: 2},
}


# =============================================================================
# Market and exit
# =============================================================================

MARKET_CARDS: tuple[MarketCard, ...] = (
    _market(1, "AI Hype Cycle",
            "AI investment is booming. Tech skills are hot, traditional sales takes a hit.",
            (0.3, 0.1, -0.2, 0.0, -0.1),
            (0.1, 0.0, 0.2, 0.0, 0.1, 0.2, 0.0, 0.15, -0.1, 0.1)),
    _market(2, "Enterprise Sales Boom",
            "Big companies are buying. Sales teams are the key to massive deals.",
            (-0.1, 0.0, 0.4, 0.1, 0.1),
            (0.0, 0.3, 0.1, 0.2, 0.0, 0.0, 0.2, 0.1, 0.25, 0.15)),
    _market(3, "Market Crash",
            "Funding winter hits hard. Only the resilient survive this downturn.",
            (-0.1, -0.1, -0.2, 0.1, 0.2),
            (0.4, 0.0, 0.3, 0.1, 0.2, 0.2, 0.15, -0.1, 0.1, 0.2)),
    _market(4, "Rapid Scaling",
            "Growth at all costs! Every department needs to step up equally.",
            (0.1, 0.15, 0.1, 0.15, 0.1),
            (0.1, 0.1, 0.1, 0.15, 0.15, 0.1, 0.2, 0.2, 0.05, 0.1)),
    _market(5, "Talent War",
            "Everyone's hiring. Soft skills command premiums.",
            (0.0, 0.1, 0.0, -0.1, 0.0),
            (0.15, 0.2, 0.0, 0.3, 0.2, 0.1, 0.25, 0.2, 0.3, 0.15)),
    _market(6, "Regulatory Crackdown",
            "Compliance is king. Finance and ops become critical.",
            (-0.1, -0.1, -0.2, 0.25, 0.3),
            (0.1, 0.15, 0.2, 0.1, 0.1, 0.15, 0.1, -0.1, 0.0, 0.2)),
)

EXIT_CARDS: tuple[ExitCard, ...] = (
    ExitCard(1, "IPO", 2.2, "You ring the bell! Public markets reward your journey with great returns."),
    ExitCard(2, "M&A", 1.8, "Acquired by a tech giant. Solid exit with strong synergies."),
    ExitCard(3, "Joint Venture", 1.5, "Strategic partnership. Conservative exit but guaranteed returns."),
)


# =============================================================================
# Setup draft
# =============================================================================

_SEGMENT_NAMES = (
    ("B2B SaaS", "Enterprise software solutions for businesses"),
    ("D2C Consumer", "Direct-to-consumer products and brands"),
    ("Fintech", "Financial technology and payments"),
    ("Healthtech", "Healthcare technology and wellness"),
    ("Edtech", "Education technology and learning platforms"),
    ("Logistics", "Supply chain and delivery solutions"),
)

# Three copies of each segment so every team can draw.
SEGMENTS: tuple[SetupCard, ...] = tuple(
    SetupCard(id=copy * len(_SEGMENT_NAMES) + index + 1, kind=SetupDeck.SEGMENT,
              name=name, description=description)
    for copy in range(3)
    for index, (name, description) in enumerate(_SEGMENT_NAMES)
)

_PRODUCT_IDEAS = (
    ("Analytics Platform", "Data insights and business intelligence"),
    ("Payment Gateway", "Transaction processing infrastructure"),
    ("HR Tool", "People management and hiring"),
    ("CRM System", "Customer relationship management"),
    ("Security Suite", "Cybersecurity and compliance"),
    ("AI Assistant", "Intelligent automation and chatbots"),
    ("Marketplace", "Multi-sided platform connecting buyers and sellers"),
    ("Mobile App", "Consumer-facing mobile application"),
    ("IoT Platform", "Connected device management and monitoring"),
    ("Collaboration Tool", "Team communication and project management"),
    ("E-commerce Engine", "Online store and checkout infrastructure"),
    ("Cloud Infrastructure", "Scalable compute and storage services"),
    ("Subscription Box", "Curated recurring product delivery"),
    ("Developer Tools", "APIs and SDKs for builders"),
    ("Video Platform", "Streaming and video conferencing"),
    ("Booking System", "Appointments and reservations management"),
)

_SERVICE_IDEAS = (
    ("Delivery Service", "Last-mile logistics and fulfillment"),
    ("Consulting", "Expert advisory and implementation"),
    ("Managed Services", "Outsourced operations and support"),
    ("Training Platform", "Skill development and certification"),
    ("Staffing Agency", "Talent acquisition and placement"),
    ("Content Creation", "Media production and marketing"),
    ("Subscription Box", "Curated recurring deliveries"),
    ("On-Demand Service", "Gig economy platform"),
    ("Insurance Services", "Risk management and coverage"),
    ("Legal Services", "Compliance and contract management"),
    ("Customer Support", "Help desk and customer success"),
    ("Data Services", "Data processing and enrichment"),
    ("Healthcare Services", "Telemedicine and wellness programs"),
    ("Financial Advisory", "Investment and tax planning"),
    ("Marketing Agency", "Brand building and growth hacking"),
    ("Facility Management", "Property and maintenance services"),
)

IDEAS: tuple[SetupCard, ...] = tuple(
    SetupCard(id=base + index + 1, kind=SetupDeck.IDEA, name=name, description=description)
    for base, table in ((100, _PRODUCT_IDEAS), (200, _SERVICE_IDEAS))
    for index, (name, description) in enumerate(table)
)

SETUP_BONUSES: tuple[SetupBonus, ...] = (
    SetupBonus("B2B SaaS", "Analytics Platform", ENGINEERING, 0.1, "Tech-driven B2B needs strong engineering"),
    SetupBonus("B2B SaaS", "CRM System", SALES, 0.15, "CRM expertise boosts sales effectiveness"),
    SetupBonus("B2B SaaS", "Security Suite", ENGINEERING, 0.15, "Security products need top engineers"),
    SetupBonus("D2C Consumer", "Mobile App", PRODUCT, 0.15, "Consumer apps need product excellence"),
    SetupBonus("D2C Consumer", "Subscription Box", OPS, 0.15, "Subscription logistics drive efficiency"),
    SetupBonus("D2C Consumer", "Marketplace", SALES, 0.1, "Marketplaces need strong seller acquisition"),
    SetupBonus("Fintech", "Payment Gateway", FINANCE, 0.2, "Payments expertise is critical"),
    SetupBonus("Fintech", "Security Suite", ENGINEERING, 0.15, "Fintech security needs top engineers"),
    SetupBonus("Fintech", "AI Assistant", ENGINEERING, 0.1, "AI in finance requires tech depth"),
    SetupBonus("Healthtech", "AI Assistant", ENGINEERING, 0.15, "Health AI needs technical depth"),
    SetupBonus("Healthtech", "Managed Services", OPS, 0.1, "Healthcare ops matter for compliance"),
    SetupBonus("Healthtech", "Mobile App", PRODUCT, 0.1, "Patient apps need great UX"),
    SetupBonus("Edtech", "Training Platform", PRODUCT, 0.15, "Learning experience drives engagement"),
    SetupBonus("Edtech", "Content Creation", PRODUCT, 0.1, "Content quality defines edtech"),
    SetupBonus("Edtech", "AI Assistant", ENGINEERING, 0.1, "AI tutors need solid tech"),
    SetupBonus("Logistics", "Delivery Service", OPS, 0.2, "Delivery excellence is everything"),
    SetupBonus("Logistics", "On-Demand Service", SALES, 0.1, "On-demand needs customer acquisition"),
    SetupBonus("Logistics", "Analytics Platform", ENGINEERING, 0.1, "Route optimization needs tech"),
)

TEAM_SLOTS: tuple[TeamSlot, ...] = (
    TeamSlot("Alpha", "#FF6B6B"),
    TeamSlot("Beta", "#4ECDC4"),
    TeamSlot("Gamma", "#45B7D1"),
    TeamSlot("Delta", "#96CEB4"),
    TeamSlot("Omega", "#FFEAA7"),
)


def default_catalog() -> CardCatalog:
    """The standard ESOP Wars content."""
    return CardCatalog(
        employees=EMPLOYEES,
        reserve_employees=RESERVE_EMPLOYEES,
        market_cards=MARKET_CARDS,
        exit_cards=EXIT_CARDS,
        segments=SEGMENTS,
        ideas=IDEAS,
        setup_bonuses=SETUP_BONUSES,
        team_slots=TEAM_SLOTS,
        employee_distribution={k: dict(v) for k, v in EMPLOYEE_DISTRIBUTION.items()},
    )


def get_employee_by_id(employee_id: int) -> EmployeeCard | None:
    for card in EMPLOYEES + RESERVE_EMPLOYEES:
        if card.id == employee_id:
            return card
    return None
