"""Pytest fixtures shared across attack report tests."""

from __future__ import annotations

from collections.abc import Sequence

import pytest

SCENARIO_LINES = [
    "VillageA attacks VillageB",
    "12.05.2024 14:23:10",
    "Attacker",
    "[Gaul] Hero from village VillageA",
    "Swordsman\tPhalanx",
    "100\t50",
    "10\t5",
    "Defender",
    "[Teuton] Boss from village VillageB",
    "Swordsman\tPhalanx",
    "80\t20",
    "5\t2",
    "Statistics",
    "Attacker",
    "Defender",
    "Combat strength",
    "500000",
    "300000",
]


@pytest.fixture
def scenario_text() -> str:
    """Return the two-combatant report used as the end-to-end golden input."""

    return "\n".join(SCENARIO_LINES)


@pytest.fixture
def full_report_text() -> str:
    """Return a report with bounty, information, and two defenders."""

    return "\n".join(
        [
            "Raiders Camp attacks Quiet Hamlet",
            "",
            "  03.11.2025 08:15:42  ",
            "Attacker",
            "[Teuton] Ragnar from village Raiders Camp",
            "\tClubswinger\tSpearman\tAxeman\tScout\tPaladin\tTeutonic Knight\tRam\tCatapult\tChief\tSettler\tHero",
            "200\t0\t150\t5\t0\t0\t10\t0\t0\t0\t1",
            "12\t0\t30\t0\t0\t0\t10\t0\t0\t0\t0",
            "Information",
            "Wall damaged from level 5 to level 3.",
            "Hero gained 120 experience.",
            "Bounty",
            "1200",
            "950",
            "1100",
            "400",
            "\u202d3650\u202c/\u202d9000\u202c",
            "Defender",
            "[Gaul] Ambiorix from village Quiet Hamlet",
            "Phalanx\tSwordsman\tPathfinder\tTheutates Thunder\tDruidrider\tHaeduan\tRam\tTrebuchet\tChieftain\tSettler\tHero",
            "80\t20\t0\t0\t0\t0\t0\t0\t0\t0\t0",
            "80\t20\t0\t0\t0\t0\t0\t0\t0\t0\t0",
            "Defender",
            "[Roman] Caesar from village Rome Reinforcement",
            "Legionnaire\tPraetorian\tImperian\tEquites Legati\tEquites Imperatoris\tEquites Caesaris\tBattering ram\tFire Catapult\tSenator\tSettler\tHero",
            "40\t60\t0\t0\t0\t0\t0\t0\t0\t0\t0",
            "10\t75\t0\t0\t0\t0\t0\t0\t0\t0\t0",
            "Statistics",
            "Attacker",
            "Defender",
            "Combat strength",
            "18,400",
            "7,250",
            "Supply before",
            "376",
            "200",
            "Supply lost",
            "62",
            "0",
            "Resources lost",
            "1.240",
            "3.650",
            "",
        ]
    )


def pytest_collection_modifyitems(items: Sequence[pytest.Item]) -> None:
    """Enforce that every test has exactly one speed marker.

    - `unit`: pure, fast tests with no Django request/command machinery.
    - `integration`: tests touching Django views, commands, or IO.

    Each test must have exactly one of these markers.
    """

    invalid: list[str] = []
    for item in items:
        has_unit = item.get_closest_marker("unit") is not None
        has_integration = item.get_closest_marker("integration") is not None
        if has_unit == has_integration:
            markers = []
            if has_unit:
                markers.append("unit")
            if has_integration:
                markers.append("integration")
            invalid.append(f"{item.nodeid} (markers={markers or 'none'})")

    if invalid:
        joined = "\n".join(f"- {nodeid}" for nodeid in invalid)
        raise pytest.UsageError(
            "Each test must have exactly one speed marker: `@pytest.mark.unit` or "
            "`@pytest.mark.integration`.\n"
            f"Offending tests:\n{joined}"
        )
