"""Best-effort attack report parsing utilities.

Attack reports are copied by hand from the game client's combat report page.
The text is loosely structured: standalone marker lines open sections, unit
tables are tab-separated, and nothing is quoted or escaped. Parsing follows
the same guiding rules as the rest of the ingestion code:

- Unknown or malformed lines are non-fatal and are skipped.
- Partially observed blocks are dropped rather than partially applied.
- The parser is pure: one call owns all of its scan state.
"""

from __future__ import annotations

import enum
import hashlib
import logging
import re
from dataclasses import dataclass, field, replace

logger = logging.getLogger(__name__)


RESOURCE_KINDS: tuple[str, ...] = ("wood", "clay", "iron", "crop")
REQUIRED_MARKERS: tuple[str, ...] = ("Attacker", "Defender", "Statistics")
STATISTIC_LABELS: tuple[str, ...] = (
    "Combat strength",
    "Supply before",
    "Supply lost",
    "Resources lost",
)
DEFAULT_MIN_UNIT_COLUMNS = 2

_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")
_INVISIBLE_CHARS_RE = re.compile("[\ufeff\u200b]")
_HEADER_RE = re.compile(r"^(.+?)\s+attacks\s+(.+)$")
_ENTITY_RE = re.compile(r"^\[(.+?)\]\s+(.+?)\s+from village\s+(.+)$")
_DIGIT_RE = re.compile(r"[0-9]")
_LEADING_INT_RE = re.compile(r"^\s*([0-9]+)")
_PURE_INT_RE = re.compile(r"^[0-9]+$")
_NOT_DIGIT_OR_SLASH_RE = re.compile(r"[^0-9/]")
_TOTAL_CAPACITY_RE = re.compile(r"([0-9]+)/([0-9]+)")
_NOT_WORD_OR_SPACE_RE = re.compile(r"[^\w\s]", re.ASCII)
_NOT_DIGIT_RE = re.compile(r"[^0-9]")


class Section(enum.Enum):
    """Report section the scan is currently inside."""

    NONE = "none"
    ATTACKER = "attacker"
    DEFENDER = "defender"
    STATISTICS = "statistics"
    INFORMATION = "information"
    BOUNTY = "bounty"


_MARKERS: dict[str, Section] = {
    "Attacker": Section.ATTACKER,
    "Defender": Section.DEFENDER,
    "Statistics": Section.STATISTICS,
    "Information": Section.INFORMATION,
    "Bounty": Section.BOUNTY,
}
_STATISTICS_COLUMN_LABELS = frozenset({"Attacker", "Defender"})


@dataclass(frozen=True)
class ReportHeader:
    """Village names and timestamp taken from the first two report lines.

    Attributes:
        attacker_village: Village named before "attacks" on the first line.
        defender_village: Village named after "attacks" on the first line.
        date_time: Second line, stored verbatim.
    """

    attacker_village: str | None = None
    defender_village: str | None = None
    date_time: str | None = None

    def as_json(self) -> dict[str, object]:
        """Return a JSON-serializable representation."""

        payload: dict[str, object] = {}
        if self.attacker_village is not None:
            payload["attackerVillage"] = self.attacker_village
        if self.defender_village is not None:
            payload["defenderVillage"] = self.defender_village
        if self.date_time is not None:
            payload["dateTime"] = self.date_time
        return payload


@dataclass(frozen=True)
class UnitCount:
    """Per-unit counts from a unit table.

    Attributes:
        initial: Units present before the battle.
        lost: Units lost in the battle.
        remaining: `max(0, initial - lost)`.
    """

    initial: int
    lost: int
    remaining: int

    @classmethod
    def from_counts(cls, initial: int, lost: int) -> UnitCount:
        """Build a UnitCount, deriving the remaining units."""

        return cls(initial=initial, lost=lost, remaining=max(0, initial - lost))

    def as_json(self) -> dict[str, object]:
        """Return a JSON-serializable representation."""

        return {"initial": self.initial, "lost": self.lost, "remaining": self.remaining}


@dataclass(frozen=True)
class Bounty:
    """Resources carried off by the attacker.

    Attributes:
        resources: Resource amounts in the order the report lists them.
        total: Total carried, from the `total/capacity` line.
        capacity: Carry capacity, from the `total/capacity` line.
    """

    resources: tuple[int, ...] = ()
    total: int | None = None
    capacity: int | None = None

    def labelled_resources(self) -> dict[str, int]:
        """Pair resource amounts with their conventional kinds.

        Notes:
            Reports carry no resource labels; the wood/clay/iron/crop order is
            positional. Amounts beyond the fourth are not labelled.
        """

        return dict(zip(RESOURCE_KINDS, self.resources))

    def as_json(self) -> dict[str, object]:
        """Return a JSON-serializable representation."""

        payload: dict[str, object] = {}
        if self.resources:
            payload["resources"] = list(self.resources)
        if self.total is not None:
            payload["total"] = self.total
        if self.capacity is not None:
            payload["capacity"] = self.capacity
        return payload


@dataclass(frozen=True)
class Combatant:
    """One side of the battle: the attacker or a single defender.

    Attributes:
        tribe: Tribe from the `[Tribe] Player from village Village` line.
        player: Player name from the same line.
        village: Village name from the same line.
        units: Unit name -> counts, from the last complete unit table.
        information: Information lines (attacker only).
        bounty: Bounty record (attacker only).
    """

    tribe: str | None = None
    player: str | None = None
    village: str | None = None
    units: dict[str, UnitCount] = field(default_factory=dict)
    information: tuple[str, ...] | None = None
    bounty: Bounty | None = None

    @property
    def total_initial(self) -> int:
        """Sum of initial units across the unit table."""

        return sum(unit.initial for unit in self.units.values())

    @property
    def total_lost(self) -> int:
        """Sum of lost units across the unit table."""

        return sum(unit.lost for unit in self.units.values())

    def as_json(self) -> dict[str, object]:
        """Return a JSON-serializable representation."""

        payload: dict[str, object] = {}
        for key in ("tribe", "player", "village"):
            value = getattr(self, key)
            if value is not None:
                payload[key] = value
        if self.units:
            payload["units"] = {name: unit.as_json() for name, unit in self.units.items()}
        if self.information is not None:
            payload["information"] = list(self.information)
        if self.bounty is not None:
            payload["bounty"] = self.bounty.as_json()
        return payload


@dataclass(frozen=True)
class StatisticValue:
    """Attacker/defender values for one statistic row."""

    attacker: int | None = None
    defender: int | None = None

    def as_json(self) -> dict[str, object]:
        """Return a JSON-serializable representation."""

        payload: dict[str, object] = {}
        if self.attacker is not None:
            payload["attacker"] = self.attacker
        if self.defender is not None:
            payload["defender"] = self.defender
        return payload


@dataclass(frozen=True)
class AttackReport:
    """Parsed output for one attack report.

    Attributes:
        header: Village names and timestamp.
        attacker: The attacking combatant (always present).
        defenders: Defending combatants in the order the report lists them.
        statistics: Statistic name -> attacker/defender values, in report order.
    """

    header: ReportHeader = field(default_factory=ReportHeader)
    attacker: Combatant = field(default_factory=Combatant)
    defenders: tuple[Combatant, ...] = ()
    statistics: dict[str, StatisticValue] = field(default_factory=dict)

    def as_json(self) -> dict[str, object]:
        """Return a JSON-serializable representation."""

        return {
            "header": self.header.as_json(),
            "attacker": self.attacker.as_json(),
            "defenders": [defender.as_json() for defender in self.defenders],
            "statistics": {name: value.as_json() for name, value in self.statistics.items()},
        }


@dataclass
class _CombatantDraft:
    """Mutable accumulator for a Combatant while the scan is running."""

    tribe: str | None = None
    player: str | None = None
    village: str | None = None
    units: dict[str, UnitCount] = field(default_factory=dict)
    information: list[str] | None = None
    resources: list[int] | None = None
    bounty_total: int | None = None
    bounty_capacity: int | None = None

    def build(self) -> Combatant:
        bounty = None
        if self.resources is not None:
            bounty = Bounty(
                resources=tuple(self.resources),
                total=self.bounty_total,
                capacity=self.bounty_capacity,
            )
        return Combatant(
            tribe=self.tribe,
            player=self.player,
            village=self.village,
            units=dict(self.units),
            information=tuple(self.information) if self.information is not None else None,
            bounty=bounty,
        )


@dataclass
class _ScanContext:
    """Call-scoped scan state threaded through the line-by-line parse."""

    min_unit_columns: int
    section: Section = Section.NONE
    header: ReportHeader = field(default_factory=ReportHeader)
    attacker: _CombatantDraft = field(default_factory=_CombatantDraft)
    defenders: list[_CombatantDraft] = field(default_factory=list)
    statistics: dict[str, dict[str, int]] = field(default_factory=dict)
    last_statistic: str | None = None
    unit_headers: list[str] = field(default_factory=list)
    unit_rows: list[list[int]] = field(default_factory=list)
    collecting_rows: bool = False

    def active_combatant(self) -> _CombatantDraft | None:
        """Return the combatant the current section writes to."""

        if self.section is Section.ATTACKER:
            return self.attacker
        if self.section is Section.DEFENDER and self.defenders:
            return self.defenders[-1]
        return None


def compute_attack_report_checksum(raw_text: str) -> str:
    """Compute a deterministic checksum for an attack report.

    Args:
        raw_text: Raw report text as pasted by the user.

    Returns:
        A hex-encoded SHA-256 checksum of the newline-normalized text.
    """

    normalized = raw_text.replace("\r\n", "\n").replace("\r", "\n").strip()
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()


def normalize_lines(raw_text: str) -> list[str]:
    """Split report text into trimmed, non-empty lines in their original order."""

    return [line for line in _trimmed_lines(raw_text) if line]


def _trimmed_lines(raw_text: str) -> list[str]:
    """Split on any newline style and trim, dropping byte-order marks and zero-width spaces."""

    cleaned = _INVISIBLE_CHARS_RE.sub("", raw_text or "")
    return [line.strip() for line in _LINE_BREAK_RE.split(cleaned)]


def validate_attack_report(raw_text: str) -> bool:
    """Return True when the report contains every mandatory marker line.

    Args:
        raw_text: Raw report text as pasted by the user.

    Returns:
        True iff `Attacker`, `Defender` and `Statistics` each appear as a whole
        (trimmed) line, in any order. Counts, ordering and section contents are
        not checked.
    """

    lines = set(_trimmed_lines(raw_text))
    return all(marker in lines for marker in REQUIRED_MARKERS)


def parse_attack_report(
    raw_text: str,
    *,
    min_unit_columns: int = DEFAULT_MIN_UNIT_COLUMNS,
) -> AttackReport:
    """Parse an attack report into a structured, immutable record.

    Args:
        raw_text: Raw report text as pasted by the user.
        min_unit_columns: Minimum number of tab-separated fields a digit-free
            line needs to be treated as a unit table header.

    Returns:
        AttackReport with every field that could be extracted. Malformed or
        missing blocks leave the matching fields empty; this never raises.
    """

    lines = normalize_lines(raw_text)
    logger.debug("Parsing attack report with %d lines", len(lines))

    context = _ScanContext(min_unit_columns=min_unit_columns)
    for index, line in enumerate(lines):
        if index < 2:
            _extract_header(context, index, line)
        _scan_line(context, line)

    report = AttackReport(
        header=context.header,
        attacker=context.attacker.build(),
        defenders=tuple(draft.build() for draft in context.defenders),
        statistics={
            name: StatisticValue(attacker=slots.get("attacker"), defender=slots.get("defender"))
            for name, slots in context.statistics.items()
        },
    )
    logger.debug(
        "Parsed attack report: %d attacker units, %d defenders, %d statistics",
        len(report.attacker.units),
        len(report.defenders),
        len(report.statistics),
    )
    return report


def _extract_header(context: _ScanContext, index: int, line: str) -> None:
    """Read village names (line 0) or the timestamp (line 1)."""

    if index == 0:
        match = _HEADER_RE.match(line)
        if match is None:
            return
        context.header = replace(
            context.header,
            attacker_village=match.group(1),
            defender_village=match.group(2),
        )
    else:
        context.header = replace(context.header, date_time=line)


def _scan_line(context: _ScanContext, line: str) -> None:
    """Dispatch one line on the current section."""

    if _transition(context, line):
        return

    section = context.section
    if section is Section.ATTACKER or section is Section.DEFENDER:
        _scan_combatant_line(context, line)
    elif section is Section.STATISTICS:
        _scan_statistics_line(context, line)
    elif section is Section.INFORMATION:
        _scan_information_line(context, line)
    elif section is Section.BOUNTY:
        _scan_bounty_line(context, line)
    elif section is Section.NONE:
        # Lines before the first marker only feed the header.
        return


def _transition(context: _ScanContext, line: str) -> bool:
    """Apply a section marker line. Returns True when the line was consumed."""

    target = _MARKERS.get(line)
    if target is None:
        return False
    if context.section is Section.STATISTICS and line in _STATISTICS_COLUMN_LABELS:
        # Column labels of the statistics table, not section markers.
        return True

    context.section = target
    context.collecting_rows = False
    if target is Section.DEFENDER:
        context.defenders.append(_CombatantDraft())
        context.unit_headers = []
        context.unit_rows = []
        logger.debug("Found Defender section %d", len(context.defenders) - 1)
    else:
        logger.debug("Found %s section", line)
    return True


def _scan_combatant_line(context: _ScanContext, line: str) -> None:
    """Extract identity and unit tables inside an Attacker/Defender section."""

    combatant = context.active_combatant()
    if combatant is None:
        return

    if "from village" in line:
        match = _ENTITY_RE.match(line)
        if match is not None:
            combatant.tribe, combatant.player, combatant.village = match.groups()
            logger.debug("Parsed %s: %s from %s", context.section.value, combatant.player, combatant.village)

    if not context.collecting_rows:
        if _is_unit_header(line, min_columns=context.min_unit_columns):
            context.unit_headers = [name.strip() for name in line.split("\t") if name.strip()]
            context.unit_rows = []
            context.collecting_rows = True
            logger.debug("Found unit headers for %s: %s", context.section.value, context.unit_headers)
        return

    if not _DIGIT_RE.match(line):
        return

    context.unit_rows.append([_parse_leading_int(value) for value in line.split("\t")])
    if len(context.unit_rows) < 2:
        return

    initial_row, lost_row = context.unit_rows
    combatant.units = {
        name: UnitCount.from_counts(_column(initial_row, index), _column(lost_row, index))
        for index, name in enumerate(context.unit_headers)
    }
    logger.debug("Assigned %d units to %s", len(combatant.units), context.section.value)
    context.unit_rows = []
    context.collecting_rows = False


def _is_unit_header(line: str, *, min_columns: int) -> bool:
    """Return True for a digit-free, tab-separated row of unit names."""

    if _DIGIT_RE.search(line) or "\t" not in line:
        return False
    return len(line.split("\t")) >= min_columns


def _column(row: list[int], index: int) -> int:
    return row[index] if index < len(row) else 0


def _parse_leading_int(value: str) -> int:
    """Parse the leading digits of a table cell, defaulting to 0."""

    match = _LEADING_INT_RE.match(value)
    if match is None:
        return 0
    return int(match.group(1))


def _scan_statistics_line(context: _ScanContext, line: str) -> None:
    """Open statistic rows and fill their attacker/defender slots."""

    if any(label in line for label in STATISTIC_LABELS):
        name = _NOT_WORD_OR_SPACE_RE.sub("", line).strip()
        context.statistics[name] = {}
        context.last_statistic = name
        logger.debug("Found statistic type: %s", name)
        return

    if not _DIGIT_RE.search(line):
        return

    value = int(_NOT_DIGIT_RE.sub("", line))
    if value <= 0 or context.last_statistic is None:
        return

    slots = context.statistics[context.last_statistic]
    if "attacker" not in slots:
        slots["attacker"] = value
    elif "defender" not in slots:
        slots["defender"] = value


def _scan_information_line(context: _ScanContext, line: str) -> None:
    if context.attacker.information is None:
        context.attacker.information = []
    context.attacker.information.append(line)


def _scan_bounty_line(context: _ScanContext, line: str) -> None:
    """Collect resource amounts and the `total/capacity` line."""

    attacker = context.attacker
    if attacker.resources is None:
        attacker.resources = []

    if _PURE_INT_RE.match(line):
        attacker.resources.append(int(line))
        return

    if "/" not in line:
        return
    match = _TOTAL_CAPACITY_RE.search(_NOT_DIGIT_OR_SLASH_RE.sub("", line))
    if match is None:
        return
    attacker.bounty_total = int(match.group(1))
    attacker.bounty_capacity = int(match.group(2))
    logger.debug("Parsed bounty total/capacity: %s/%s", match.group(1), match.group(2))
