"""Tests for answer-file edits."""

from pathlib import Path

import pytest

from srs_media.lib.answer_file import NS, AnswerDocument, AnswerFileError
from tests.fakes import ANSWER_FILE


def _doc(text: str = ANSWER_FILE) -> AnswerDocument:
    return AnswerDocument.from_string(text)


def _texts(doc: AnswerDocument, xpath: str) -> list:
    return [n.text for n in doc.root.xpath(xpath, namespaces=NS)]


def test_compat_revision_defaults_to_zero() -> None:
    doc = _doc(ANSWER_FILE.replace("<!-- srsv2-compat-rev:1 -->", ""))

    assert doc.compat_revision() == 0
    assert doc.is_compatible(0)


def test_compat_uses_highest_marker() -> None:
    doc = _doc(ANSWER_FILE.replace("<!-- srsv2-compat-rev:1 -->", "<!-- srsv2-compat-rev:1 --><!-- SRSv2-Compat-Rev: 3 -->"))

    assert doc.compat_revisions() == [1, 3]
    assert doc.is_compatible(3)
    assert not doc.is_compatible(2)


def test_compat_ignores_unrelated_comments() -> None:
    assert _doc().compat_revisions() == [1]


def test_malformed_compat_marker() -> None:
    with pytest.raises(AnswerFileError):
        _doc(ANSWER_FILE.replace("srsv2-compat-rev:1", "srsv2-compat-rev:latest")).compat_revision()


def test_inject_product_key_once() -> None:
    doc = _doc()

    assert doc.inject_product_key("AAAAA-BBBBB-CCCCC-DDDDD-EEEEE") is True
    assert doc.inject_product_key("FFFFF-GGGGG-HHHHH-JJJJJ-KKKKK") is False

    assert _texts(doc, "//u:ProductKey") == ["AAAAA-BBBBB-CCCCC-DDDDD-EEEEE"]
    first = doc.root.xpath("u:settings[@pass='specialize']/*", namespaces=NS)[0]
    assert first.get("name") == "Microsoft-Windows-Shell-Setup"


def test_inject_product_key_respects_preseeded_key() -> None:
    preseeded = ANSWER_FILE.replace(
        "<RunSynchronous />", "<RunSynchronous /></component><component name=\"Microsoft-Windows-Shell-Setup\"><ProductKey>MANUAL</ProductKey>"
    )
    doc = _doc(preseeded)

    assert doc.inject_product_key("NEW") is False
    assert _texts(doc, "//u:ProductKey") == ["MANUAL"]


def test_inject_product_key_requires_specialize_pass() -> None:
    doc = _doc(ANSWER_FILE.replace('pass="specialize"', 'pass="oobeSystem"'))

    with pytest.raises(AnswerFileError, match="specialize"):
        doc.inject_product_key("KEY")


def test_uefi_boot_leaves_layout_alone() -> None:
    doc = _doc()
    before = doc.to_string()

    doc.set_boot_mode(legacy=False)

    assert doc.to_string() == before


def test_legacy_boot_drops_efi_partition() -> None:
    doc = _doc()

    doc.set_boot_mode(legacy=True)

    partitions = "//u:CreatePartitions/u:CreatePartition"
    assert _texts(doc, f"{partitions}/u:Type") == ["Primary"]
    assert _texts(doc, f"{partitions}/u:Order") == ["1"]
    assert _texts(doc, "//u:InstallTo/u:PartitionID") == ["1"]


def test_legacy_boot_requires_two_partitions() -> None:
    doc = _doc()
    doc.set_boot_mode(legacy=True)

    with pytest.raises(AnswerFileError):
        doc.set_boot_mode(legacy=True)


def test_shutdown_rewrites_trailing_reboot() -> None:
    doc = _doc()

    doc.set_post_install_action(shutdown=True)

    assert doc.sysprep_command().text.endswith("/Generalize /OOBE /shutdown")
    assert "change /reboot" not in doc.to_string()


def test_reboot_keeps_command_but_strips_comments() -> None:
    doc = _doc()

    doc.set_post_install_action(shutdown=False)

    assert doc.sysprep_command().text.endswith("/reboot")
    assert "change /reboot" not in doc.to_string()
    assert doc.compat_revisions() == [1]


def test_missing_sysprep_command_is_error() -> None:
    doc = _doc(ANSWER_FILE.replace("/Generalize /OOBE", "/quiet"))

    with pytest.raises(AnswerFileError, match="found 0"):
        doc.set_post_install_action()


def test_multiple_sysprep_commands_is_error() -> None:
    doc = _doc(ANSWER_FILE.replace("powershell -File C:\\Rigel\\setup.ps1", "sysprep /generalize /oobe /quit"))

    with pytest.raises(AnswerFileError, match="found 2"):
        doc.sysprep_command()


def test_load_edit_save_round_trip(answer_file: Path) -> None:
    doc = AnswerDocument.load(answer_file)
    doc.inject_product_key("AAAAA-BBBBB-CCCCC-DDDDD-EEEEE")
    doc.set_boot_mode(legacy=True)
    doc.set_post_install_action(shutdown=True)
    doc.save()

    reloaded = AnswerDocument.load(answer_file)
    assert reloaded.compat_revision() == 1
    assert _texts(reloaded, "//u:ProductKey") == ["AAAAA-BBBBB-CCCCC-DDDDD-EEEEE"]
    assert _texts(reloaded, "//u:InstallTo/u:PartitionID") == ["1"]
    assert reloaded.sysprep_command().text.endswith("/shutdown")


def test_save_without_path() -> None:
    with pytest.raises(ValueError):
        _doc().save()
