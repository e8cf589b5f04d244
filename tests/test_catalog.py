import pytest

from app.core.exceptions import InvalidPackageException
from app.services import catalog


def test_gold_package():
    package = catalog.lookup("gold")
    assert package.name == "Gold Package"
    assert package.price == 2999
    assert package.credits == 200


def test_silver_package_grants_100_credits():
    assert catalog.lookup("silver").credits == 100


@pytest.mark.parametrize("package_id", ["bronze", "", None, "GOLD"])
def test_unknown_package_is_not_found(package_id):
    assert catalog.lookup(package_id) is None


def test_get_package_raises_for_unknown_id():
    with pytest.raises(InvalidPackageException) as exc_info:
        catalog.get_package("bronze")
    assert exc_info.value.status_code == 400


def test_every_package_is_keyed_by_its_id():
    for package_id, package in catalog.list_packages().items():
        assert package.id == package_id
        assert package.price > 0
        assert package.credits > 0
