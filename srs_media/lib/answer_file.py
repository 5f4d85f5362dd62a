from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import List, Optional

from lxml import etree

logger = logging.getLogger(__name__)

UNATTEND_NS = "urn:schemas-microsoft-com:unattend"
NS = {"u": UNATTEND_NS}

# Highest answer-file compatibility revision this tool knows how to edit.
SUPPORTED_COMPAT_REVISION = 2

COMPAT_PREFIX = "srsv2-compat-rev:"

SETUP_COMPONENT_ATTRS = {
    "processorArchitecture": "amd64",
    "publicKeyToken": "31bf3856ad364e35",
    "language": "neutral",
    "versionScope": "nonSxS",
}

_TRAILING_REBOOT = re.compile(r"/reboot(\s*)$", re.IGNORECASE)


class AnswerFileError(ValueError):
    pass


def _q(tag: str) -> str:
    return f"{{{UNATTEND_NS}}}{tag}"


class AnswerDocument:
    """An unattended-setup answer file loaded for in-place editing.

    Only the handful of schema paths this tool edits are supported; a missing
    node means the kit shipped a document this tool does not understand and
    is reported as AnswerFileError.
    """

    def __init__(self, tree: etree._ElementTree, path: Optional[Path] = None) -> None:
        self.tree = tree
        self.path = path

    @classmethod
    def load(cls, path: str | Path) -> "AnswerDocument":
        p = Path(path)
        parser = etree.XMLParser(remove_comments=False)
        return cls(etree.parse(str(p), parser), path=p)

    @classmethod
    def from_string(cls, text: str | bytes) -> "AnswerDocument":
        data = text.encode("utf-8") if isinstance(text, str) else text
        root = etree.fromstring(data, etree.XMLParser(remove_comments=False))
        return cls(root.getroottree())

    @property
    def root(self) -> etree._Element:
        return self.tree.getroot()

    def save(self, path: str | Path | None = None) -> Path:
        out = Path(path) if path is not None else self.path
        if out is None:
            raise ValueError("No path to save the answer file to")
        self.tree.write(str(out), xml_declaration=True, encoding="utf-8")
        logger.info("Saved answer file %s", out)
        return out

    def to_string(self) -> str:
        return etree.tostring(self.root, encoding="unicode")

    def _one(self, xpath: str, context: Optional[etree._Element] = None) -> etree._Element:
        found = (context if context is not None else self.root).xpath(xpath, namespaces=NS)
        if not found:
            raise AnswerFileError(f"Answer file has no node at {xpath}")
        return found[0]

    def _settings(self, pass_name: str) -> etree._Element:
        return self._one(f"/u:unattend/u:settings[@pass='{pass_name}']")

    # Compatibility revision lives in comments like <!-- srsv2-compat-rev:2 -->.

    def compat_revisions(self) -> List[int]:
        revs: List[int] = []
        for comment in self.tree.xpath("//comment()"):
            text = (comment.text or "").strip()
            if not text.lower().startswith(COMPAT_PREFIX):
                continue
            value = text[len(COMPAT_PREFIX):].strip()
            try:
                revs.append(int(value))
            except ValueError as e:
                raise AnswerFileError(f"Malformed compatibility marker: {text!r}") from e
        return revs

    def compat_revision(self) -> int:
        """Revision the document requires; 0 when it declares none."""
        return max(self.compat_revisions(), default=0)

    def is_compatible(self, supported: int = SUPPORTED_COMPAT_REVISION) -> bool:
        return supported >= self.compat_revision()

    def inject_product_key(self, key: str) -> bool:
        """Add ``key`` to the specialize pass unless a key is already there.

        Returns True if a key was inserted.
        """

        specialize = self._settings("specialize")
        if specialize.xpath(".//u:ProductKey", namespaces=NS):
            logger.info("Answer file already carries a product key; leaving it")
            return False

        component = etree.Element(_q("component"))
        component.set("name", "Microsoft-Windows-Shell-Setup")
        for k, v in SETUP_COMPONENT_ATTRS.items():
            component.set(k, v)
        etree.SubElement(component, _q("ProductKey")).text = key
        specialize.insert(0, component)
        logger.info("Injected product key into specialize pass")
        return True

    def set_boot_mode(self, *, legacy: bool) -> None:
        """Rewrite the disk layout for legacy BIOS boot.

        UEFI layouts are left untouched. For legacy boot the EFI system
        partition (the first CreatePartition) is dropped, the remaining
        partitions are renumbered from 1 and the OS image is installed to
        partition 1.
        """

        if not legacy:
            return

        setup = self._one(
            "/u:unattend/u:settings[@pass='windowsPE']/u:component[@name='Microsoft-Windows-Setup']"
        )
        create = self._one("u:DiskConfiguration/u:Disk/u:CreatePartitions", setup)
        partitions = create.xpath("u:CreatePartition", namespaces=NS)
        if len(partitions) < 2:
            raise AnswerFileError(
                f"Expected an EFI partition plus an OS partition, found {len(partitions)}"
            )
        create.remove(partitions[0])
        for order, part in enumerate(partitions[1:], start=1):
            self._one("u:Order", part).text = str(order)

        self._one("u:ImageInstall/u:OSImage/u:InstallTo/u:PartitionID", setup).text = "1"
        logger.info("Answer file switched to legacy boot layout")

    def sysprep_command(self) -> etree._Element:
        """Return the auditUser command that runs sysprep /generalize /oobe."""

        audit = self._settings("auditUser")
        matches = [
            node
            for node in audit.xpath(".//u:RunSynchronousCommand/u:Path", namespaces=NS)
            if all(w in (node.text or "").lower() for w in ("sysprep", "generalize", "oobe"))
        ]
        if len(matches) != 1:
            raise AnswerFileError(
                f"Expected exactly one sysprep generalize/oobe command, found {len(matches)}"
            )
        return matches[0]

    def set_post_install_action(self, *, shutdown: bool = True) -> None:
        command = self.sysprep_command()
        parent = command.getparent()
        for child in list(parent):
            if isinstance(child, etree._Comment):
                parent.remove(child)

        if not shutdown:
            return
        command.text = _TRAILING_REBOOT.sub(r"/shutdown\1", command.text or "")
        logger.info("Sysprep will shut down after generalize: %s", command.text)
