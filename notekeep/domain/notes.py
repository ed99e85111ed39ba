"""Note repository model and its XML mapping."""
from __future__ import annotations

import re
import uuid
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from notekeep.domain.xml_utils import sanitize_xml_string

ROOT_TAG = "silentnotes"
NEWEST_SUPPORTED_REVISION = 7
CURRENT_SAVING_REVISION = 7
DEFAULT_NOTE_COLOR = "#fbf4c1"

_FRACTION = re.compile(r"\.(\d+)")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, accepting up to 7 fractional digits and a trailing Z."""
    text = (value or "").strip()
    if not text:
        raise ValueError("Empty timestamp")
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _parse_bool(value: str | None) -> bool:
    return (value or "").strip().lower() == "true"


def _format_bool(value: bool) -> str:
    return "true" if value else "false"


def _parse_uuid(value: str | None) -> str:
    return str(uuid.UUID((value or "").strip()))


class NoteType(str, Enum):
    TEXT = "Text"
    CHECKLIST = "Checklist"


@dataclass
class Note:
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    note_type: NoteType = NoteType.TEXT
    html_content: str = ""
    tags: list[str] = field(default_factory=list)
    background_color: str = DEFAULT_NOTE_COLOR
    in_recycling_bin: bool = False
    shopping_mode: bool = False
    is_pinned: bool = False
    created_at: datetime = field(default_factory=_now)
    modified_at: Optional[datetime] = None
    meta_modified_at: Optional[datetime] = None
    safe_id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.modified_at is None:
            self.modified_at = self.created_at

    def effective_meta_modified_at(self) -> Optional[datetime]:
        # a newer modified_at makes the meta timestamp irrelevant
        if self.meta_modified_at and self.modified_at and self.meta_modified_at <= self.modified_at:
            return None
        return self.meta_modified_at

    def refresh_modified_at(self) -> None:
        self.modified_at = _now()

    def refresh_meta_modified_at(self) -> None:
        self.meta_modified_at = _now()

    def to_xml(self) -> ET.Element:
        element = ET.Element("note")
        element.set("id", self.id)
        element.set("note_type", self.note_type.value)
        element.set("background_color", self.background_color)
        element.set("in_recycling_bin", _format_bool(self.in_recycling_bin))
        element.set("shopping_mode", _format_bool(self.shopping_mode))
        element.set("note_pinned", _format_bool(self.is_pinned))
        element.set("created_at", format_timestamp(self.created_at))
        element.set("modified_at", format_timestamp(self.modified_at or self.created_at))
        meta = self.effective_meta_modified_at()
        if meta is not None:
            element.set("meta_modified_at", format_timestamp(meta))
        ET.SubElement(element, "html_content").text = sanitize_xml_string(self.html_content)
        tags = ET.SubElement(element, "tags")
        for tag in self.tags:
            ET.SubElement(tags, "tag").text = sanitize_xml_string(tag)
        if self.safe_id:
            ET.SubElement(element, "safe").text = self.safe_id
        return element

    @classmethod
    def from_xml(cls, element: ET.Element) -> "Note":
        if element.tag != "note":
            raise ValueError(f"Unexpected note element <{element.tag}>")
        created_at = parse_timestamp(element.get("created_at", "")) if element.get("created_at") else _now()
        modified_raw = element.get("modified_at")
        meta_raw = element.get("meta_modified_at")
        safe_element = element.find("safe")
        tags_element = element.find("tags")
        return cls(
            id=_parse_uuid(element.get("id")) if element.get("id") else str(uuid.uuid4()),
            note_type=NoteType(element.get("note_type") or NoteType.TEXT.value),
            html_content=element.findtext("html_content") or "",
            tags=[tag.text or "" for tag in tags_element.findall("tag")] if tags_element is not None else [],
            background_color=element.get("background_color") or DEFAULT_NOTE_COLOR,
            in_recycling_bin=_parse_bool(element.get("in_recycling_bin")),
            shopping_mode=_parse_bool(element.get("shopping_mode")),
            is_pinned=_parse_bool(element.get("note_pinned")),
            created_at=created_at,
            modified_at=parse_timestamp(modified_raw) if modified_raw else created_at,
            meta_modified_at=parse_timestamp(meta_raw) if meta_raw else None,
            safe_id=_parse_uuid(safe_element.text) if safe_element is not None and safe_element.text else None,
        )


@dataclass
class NoteRepository:
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    revision: int = 0
    order_modified_at: datetime = field(default_factory=_now)
    notes: list[Note] = field(default_factory=list)
    deleted_notes: list[str] = field(default_factory=list)
    # encrypted safe headers, kept verbatim
    safes: list[ET.Element] = field(default_factory=list)

    def refresh_order_modified_at(self) -> None:
        self.order_modified_at = _now()

    def collect_active_tags(self) -> list[str]:
        """Distinct tags of all notes outside the recycle bin, sorted case-insensitively."""
        seen: dict[str, str] = {}
        for note in self.notes:
            if note.in_recycling_bin:
                continue
            for tag in note.tags:
                seen.setdefault(tag.casefold(), tag)
        return sorted(seen.values(), key=str.casefold)

    def to_xml(self) -> ET.Element:
        root = ET.Element(ROOT_TAG)
        root.set("id", self.id)
        root.set("revision", str(self.revision))
        root.set("order_modified_at", format_timestamp(self.order_modified_at))
        notes = ET.SubElement(root, "notes")
        for note in self.notes:
            notes.append(note.to_xml())
        deleted = ET.SubElement(root, "deleted_notes")
        for note_id in self.deleted_notes:
            ET.SubElement(deleted, "deleted_note").text = note_id
        safes = ET.SubElement(root, "safes")
        for safe in self.safes:
            safes.append(safe)
        return root

    @classmethod
    def from_xml(cls, root: ET.Element) -> "NoteRepository":
        if root.tag != ROOT_TAG:
            raise ValueError(f"Not a note repository: <{root.tag}>")
        order_raw = root.get("order_modified_at")
        notes_element = root.find("notes")
        deleted_element = root.find("deleted_notes")
        safes_element = root.find("safes")
        return cls(
            id=_parse_uuid(root.get("id")) if root.get("id") else str(uuid.uuid4()),
            revision=int(root.get("revision", "0")),
            order_modified_at=parse_timestamp(order_raw) if order_raw else _now(),
            notes=[Note.from_xml(el) for el in notes_element] if notes_element is not None else [],
            deleted_notes=[
                _parse_uuid(el.text) for el in deleted_element.findall("deleted_note")
            ] if deleted_element is not None else [],
            safes=list(safes_element) if safes_element is not None else [],
        )


INVALID_REPOSITORY = NoteRepository(id="00000000-0000-0000-0000-000000000000")
