"""Upgrades stored note repositories written by older revisions."""
from __future__ import annotations

import html
import xml.etree.ElementTree as ET

from notekeep.domain.notes import CURRENT_SAVING_REVISION, NEWEST_SUPPORTED_REVISION


def _revision(root: ET.Element) -> int:
    value = root.get("revision")
    if value is None:
        raise ValueError("Repository has no revision attribute")
    return int(value)


class NoteRepositoryUpdater:
    """Migrates repository XML in place before it is deserialized."""

    def __init__(self, newest_supported_revision: int = NEWEST_SUPPORTED_REVISION) -> None:
        self.newest_supported_revision = newest_supported_revision

    def is_too_new_for_this_app(self, root: ET.Element) -> bool:
        return _revision(root) > self.newest_supported_revision

    def update(self, root: ET.Element) -> bool:
        """Return True when the document was modified and should be saved again."""
        old_revision = _revision(root)

        # nothing to migrate between 2 and the current revision
        if old_revision <= 1:
            self._update_from_1_to_2(root)

        updated = old_revision < CURRENT_SAVING_REVISION
        if updated:
            root.set("revision", str(CURRENT_SAVING_REVISION))
        return updated

    @staticmethod
    def _update_from_1_to_2(root: ET.Element) -> None:
        notes = root.find("notes")
        if notes is None:
            return
        for note in notes:
            parts: list[str] = []
            title_element = note.find("title")
            content_element = note.find("content")
            title = title_element.text if title_element is not None else None
            content = content_element.text if content_element is not None else None

            if title and title.strip():
                parts.append(f"<h1>{html.escape(title)}</h1>")
            if content and content.strip():
                paragraphs = html.escape(content).replace("\n", "</p><p>")
                parts.append(f"<p>{paragraphs}</p>")

            if title_element is not None:
                note.remove(title_element)
            if content_element is not None:
                note.remove(content_element)
            ET.SubElement(note, "html_content").text = "".join(parts)
