"""
Matroska/WebM handler backed by MKVToolNix.

Matroska tags are edited out of process: ``mkvextract`` dumps the tag
document as XML, the document is modified in memory, and ``mkvpropedit``
replaces the file's tags from a temporary XML file.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import tempfile
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import TYPE_CHECKING

from playtag.errors import ExternalToolError, PlaytagError
from playtag.handlers.base import PLAYTAG_FIELD, TagHandler

if TYPE_CHECKING:
    from playtag.config import Config

logger = logging.getLogger(__name__)


class MkvToolnix:
    """Thin wrapper around the ``mkvextract`` and ``mkvpropedit`` executables."""

    def __init__(
        self,
        mkvextract: str = "mkvextract",
        mkvpropedit: str = "mkvpropedit",
        timeout_s: float = 60.0,
        debug: bool = False,
    ):
        self.mkvextract = mkvextract
        self.mkvpropedit = mkvpropedit
        self.timeout_s = timeout_s
        self.debug = debug

    @classmethod
    def from_config(cls, config: Config | None) -> MkvToolnix:
        if config is None:
            return cls()
        return cls(
            mkvextract=config.mkvtoolnix.mkvextract,
            mkvpropedit=config.mkvtoolnix.mkvpropedit,
            timeout_s=config.mkvtoolnix.timeout_s,
            debug=config.debug,
        )

    def _run(self, executable: str, args: list[str]) -> subprocess.CompletedProcess[str]:
        tool_path = shutil.which(executable)
        if not tool_path:
            raise ExternalToolError(f"{executable} not found. Install MKVToolNix to edit Matroska tags.")

        cmd = [tool_path, *args]
        logger.debug(f"Running {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout_s,
            )
        except subprocess.TimeoutExpired as e:
            raise ExternalToolError(f"{executable} timed out after {self.timeout_s}s") from e
        except OSError as e:
            raise ExternalToolError(f"Could not run {executable}: {e}") from e

        if self.debug and result.stderr:
            logger.debug(result.stderr.rstrip())

        if result.returncode != 0:
            detail = (result.stderr or result.stdout).strip()
            raise ExternalToolError(f"{executable} failed with exit status {result.returncode}: {detail}")

        return result

    def extract_tags(self, path: Path) -> str:
        """Return the file's tag document as XML text (empty when the file has no tags)."""
        return self._run(self.mkvextract, ["tags", str(path)]).stdout

    def apply_tags(self, path: Path, xml_path: Path | None) -> None:
        """
        Replace every tag in ``path`` with the document at ``xml_path``.

        A None ``xml_path`` removes all tags.
        """
        result = self._run(self.mkvpropedit, [str(path), "--tags", f"all:{xml_path or ''}"])
        if self.debug and result.stdout:
            logger.debug(result.stdout.rstrip())


def _simple_name(simple: ET.Element) -> str:
    return (simple.findtext("Name") or "").strip()


def find_playtag_simples(root: ET.Element) -> list[tuple[ET.Element, ET.Element]]:
    """Return (tag, simple) pairs for every PLAYTAG simple tag, in document order."""
    found = []
    for tag in root.findall("Tag"):
        for simple in tag.findall("Simple"):
            if _simple_name(simple).upper() == PLAYTAG_FIELD:
                found.append((tag, simple))
    return found


def set_playtag(root: ET.Element, value: str) -> None:
    """Store ``value`` in the first PLAYTAG simple tag, dropping any others."""
    found = find_playtag_simples(root)
    if found:
        _, simple = found[0]
        for tag, extra in found[1:]:
            tag.remove(extra)
    else:
        tag = ET.SubElement(root, "Tag")
        simple = ET.SubElement(tag, "Simple")
        ET.SubElement(simple, "Name").text = PLAYTAG_FIELD

    string = simple.find("String")
    if string is None:
        string = ET.SubElement(simple, "String")
    string.text = value


def remove_playtag(root: ET.Element) -> bool:
    """
    Remove every PLAYTAG simple tag and any Tag left without simples.

    Returns:
        True if the document changed
    """
    found = find_playtag_simples(root)
    for tag, simple in found:
        tag.remove(simple)
    for tag in {id(tag): tag for tag, _ in found}.values():
        if tag.find("Simple") is None:
            root.remove(tag)
    return bool(found)


class MatroskaTagHandler(TagHandler):
    """Stores the playtag as a ``PLAYTAG`` simple tag in a Matroska/WebM file."""

    name = "matroska"

    def __init__(self, path: Path, config: Config | None = None, tools: MkvToolnix | None = None):
        super().__init__(path, config)
        self.tools = tools or MkvToolnix.from_config(config)
        self.valid = path.is_file()

    @classmethod
    def open(cls, path: Path, mime: str, config: Config | None = None) -> MatroskaTagHandler:
        return cls(path, config)

    def _check_valid(self) -> None:
        if not self.valid:
            raise PlaytagError(f"Not a readable file: {self.path}")

    def _load(self) -> ET.Element | None:
        self._check_valid()
        text = self.tools.extract_tags(self.path)
        if not text.strip():
            return None
        try:
            return ET.fromstring(text)
        except ET.ParseError as e:
            raise ExternalToolError(f"mkvextract produced invalid XML: {e}") from e

    def _apply(self, root: ET.Element) -> None:
        if root.find("Tag") is None:
            self.tools.apply_tags(self.path, None)
            return

        fd, tmp_name = tempfile.mkstemp(prefix="playtag-", suffix=".xml")
        os.close(fd)
        xml_path = Path(tmp_name)
        try:
            ET.ElementTree(root).write(xml_path, encoding="utf-8", xml_declaration=True)
            self.tools.apply_tags(self.path, xml_path)
        finally:
            xml_path.unlink(missing_ok=True)

    def _read(self) -> str | None:
        root = self._load()
        if root is None:
            return None
        for _, simple in find_playtag_simples(root):
            value = simple.findtext("String")
            if value:
                return value
        return None

    def _write(self, value: str) -> None:
        root = self._load()
        if root is None:
            root = ET.Element("Tags")
        set_playtag(root, value)
        self._apply(root)

    def _clear(self) -> None:
        root = self._load()
        if root is None:
            return
        if remove_playtag(root):
            self._apply(root)
