"""Manifest entry models.

This module defines the data structures for a single declared package
resource and the parser for Brewfile-style manifest lines.
"""

import re
from dataclasses import dataclass, field
from enum import Enum


class EntryKind(Enum):
    """Kind of declared package resource.

    The value of each member is the keyword that starts its manifest line.
    """

    TAP = "tap"
    FORMULA = "brew"
    CASK = "cask"
    APP_STORE_APP = "mas"
    EDITOR_EXTENSION = "vscode"

    @property
    def label(self) -> str:
        """Human-readable plural label used in summaries."""
        return _KIND_LABELS[self]


_KIND_LABELS: dict[EntryKind, str] = {
    EntryKind.TAP: "Taps",
    EntryKind.FORMULA: "Formulae",
    EntryKind.CASK: "Casks",
    EntryKind.APP_STORE_APP: "MAS apps",
    EntryKind.EDITOR_EXTENSION: "VS Code extensions",
}

# Keyword, quoted identifier, then either ", metadata" or a trailing
# statement modifier such as "if OS.mac?"
_ENTRY_PATTERN = re.compile(
    r"""^(?P<kind>tap|brew|cask|mas|vscode)\s+
        (?P<quote>["'])(?P<identifier>[^"']+)(?P=quote)
        (?:\s*,\s*(?P<options>.*?)|\s+(?P<modifier>[^\s\#].*?))?
        \s*(?:\#.*)?$""",
    re.VERBOSE,
)

# Lines the merger keeps: any line starting with a recognized keyword
_KEYWORD_PATTERN = re.compile(r"^(tap|brew|cask|mas|vscode)\s")

_OPTION_PATTERN = re.compile(r"""(\w+):\s*(?:"([^"]*)"|'([^']*)'|([^,\s]+))""")


@dataclass(frozen=True, slots=True)
class Entry:
    """A single declared package resource.

    Attributes:
        kind: Resource kind (tap, formula, cask, App Store app, editor extension).
        identifier: Package name, tap name, app name or extension id.
        options: Raw metadata suffix after the identifier (e.g. 'id: 497799835').
        modifier: Trailing statement modifier (e.g. 'if OS.mac?').
        store_id: Numeric App Store id, when declared.
        version: Version pin, when declared.
    """

    kind: EntryKind
    identifier: str
    options: str | None = field(default=None)
    modifier: str | None = field(default=None)
    store_id: int | None = field(default=None)
    version: str | None = field(default=None)

    def __post_init__(self) -> None:
        """Validate entry data after initialization."""
        if not self.identifier:
            msg = "Entry identifier cannot be empty"
            raise ValueError(msg)

    @property
    def ref(self) -> str:
        """Short reference such as 'brew:git'."""
        return f"{self.kind.value}:{self.identifier}"

    @property
    def short_name(self) -> str:
        """Identifier without its tap prefix ('hashicorp/tap/terraform' -> 'terraform')."""
        return self.identifier.rsplit("/", 1)[-1]

    def to_line(self) -> str:
        """Render the entry as a manifest line."""
        line = f'{self.kind.value} "{self.identifier}"'
        if self.options:
            line += f", {self.options}"
        if self.modifier:
            line += f" {self.modifier}"
        return line

    def matches(self, other: "Entry") -> bool:
        """Check whether two entries declare the same package.

        Formulae compare on their short name so tap-qualified names match
        their bare form. Editor extensions compare case-insensitively.
        App Store apps compare on store id when both sides carry one.

        Args:
            other: Entry to compare against.

        Returns:
            True if both entries refer to the same package.
        """
        if self.kind != other.kind:
            return False
        if self.kind == EntryKind.APP_STORE_APP:
            if self.store_id is not None and other.store_id is not None:
                return self.store_id == other.store_id
            return self.identifier == other.identifier
        if self.kind == EntryKind.EDITOR_EXTENSION:
            return self.identifier.lower() == other.identifier.lower()
        if self.kind == EntryKind.FORMULA:
            return self.identifier == other.identifier or self.short_name == other.short_name
        return self.identifier == other.identifier


def is_entry_line(line: str) -> bool:
    """Check whether a manifest line starts with a recognized keyword.

    Args:
        line: Raw manifest line.

    Returns:
        True if the line declares a tap, brew, cask, mas or vscode entry.
    """
    return _KEYWORD_PATTERN.match(line) is not None


def parse_entry(line: str) -> Entry | None:
    """Parse a single manifest line into an Entry.

    Args:
        line: Raw manifest line.

    Returns:
        Entry if the line declares a recognized resource, None otherwise.
    """
    match = _ENTRY_PATTERN.match(line.strip())
    if match is None:
        return None

    options = match.group("options") or None
    store_id: int | None = None
    version: str | None = None

    if options:
        for key, dq, sq, bare in _OPTION_PATTERN.findall(options):
            value = dq or sq or bare
            if key == "id" and value.isdigit():
                store_id = int(value)
            elif key == "version":
                version = value

    return Entry(
        kind=EntryKind(match.group("kind")),
        identifier=match.group("identifier"),
        options=options,
        modifier=match.group("modifier") or None,
        store_id=store_id,
        version=version,
    )


def parse_entries(text: str) -> list[Entry]:
    """Parse all recognized entries from manifest text, in order.

    Comments, blank lines and unrecognized lines are skipped.

    Args:
        text: Full manifest content.

    Returns:
        List of entries in declaration order (duplicates preserved).
    """
    entries: list[Entry] = []
    for line in text.splitlines():
        entry = parse_entry(line)
        if entry is not None:
            entries.append(entry)
    return entries


def count_by_kind(entries: list[Entry]) -> dict[EntryKind, int]:
    """Count entries per kind.

    Args:
        entries: Entries to count.

    Returns:
        Mapping with a count for every EntryKind (zero when absent).
    """
    counts = {kind: 0 for kind in EntryKind}
    for entry in entries:
        counts[entry.kind] += 1
    return counts
