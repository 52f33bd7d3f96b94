"""Tests for spec version allocation."""

import pytest

from specforge.errors.exceptions import ValidationError
from specforge.models.enums import BumpPolicy
from specforge.services.versioning import INITIAL_VERSION, next_version, parse_version


def test_first_version():
    assert next_version([]) == INITIAL_VERSION == "1.0.0"


def test_patch_bump_uses_newest_entry():
    assert next_version(["1.0.4", "1.0.3", "1.0.0"]) == "1.0.5"


def test_patch_has_no_carry():
    assert next_version(["2.3.9"]) == "2.3.10"
    assert next_version(["1.9.99"]) == "1.9.100"


def test_minor_and_major_policies_reset_lower_segments():
    assert next_version(["2.3.9"], BumpPolicy.MINOR) == "2.4.0"
    assert next_version(["2.3.9"], BumpPolicy.MAJOR) == "3.0.0"
    assert next_version(["2.3.9"], "minor") == "2.4.0"


@pytest.mark.parametrize("bad", ["1.0", "1.0.0.0", "1.x.0", "v1.0.0", "", "1..0"])
def test_malformed_version_rejected(bad):
    with pytest.raises(ValidationError):
        next_version([bad])


def test_parse_version():
    assert parse_version(" 10.2.33 ") == (10, 2, 33)
