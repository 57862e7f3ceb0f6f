import itertools
import pytest

from s3checker.capabilities import map_capabilities, CapabilityVerdict


EXPECTED = {
    # (list, put, get): (Backup, Restore, Import, Export, Enterprise Changefeeds)
    (True, True, True): (True, True, True, True, True),
    (True, True, False): (False, False, False, True, True),
    (True, False, True): (False, True, True, False, False),
    (True, False, False): (False, False, False, False, False),
    (False, True, True): (False, False, True, True, True),
    (False, True, False): (False, False, False, True, True),
    (False, False, True): (False, False, True, False, False),
    (False, False, False): (False, False, False, False, False),
}


@pytest.mark.parametrize("flags", list(itertools.product([True, False], repeat=3)))
def test_truth_table(flags):
    list_ok, put_ok, get_ok = flags
    verdicts = map_capabilities(list_ok, put_ok, get_ok)
    assert [v.sufficient for v in verdicts] == list(EXPECTED[flags])


def test_names_and_order():
    verdicts = map_capabilities(True, True, True)
    assert [v.name for v in verdicts] == ["Backup", "Restore", "Import", "Export", "Enterprise Changefeeds"]


def test_put_denied_still_allows_restore_and_import():
    verdicts = {v.name: v.sufficient for v in map_capabilities(list_ok=True, put_ok=False, get_ok=True)}
    assert verdicts == {
        "Backup": False,
        "Restore": True,
        "Import": True,
        "Export": False,
        "Enterprise Changefeeds": False,
    }


def test_deterministic():
    assert map_capabilities(False, True, True) == map_capabilities(False, True, True)
    assert map_capabilities(True, True, True)[0] == CapabilityVerdict("Backup", True)
