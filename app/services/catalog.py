from typing import Dict, Optional

from app.core.exceptions import InvalidPackageException
from app.schemas.payment import Package

# Subscription packages, billed monthly
PACKAGES: Dict[str, Package] = {
    "silver": Package(id="silver", name="Silver Package", price=1999, credits=100),
    "security": Package(id="security", name="Security Package", price=2499, credits=150),
    "gold": Package(id="gold", name="Gold Package", price=2999, credits=200),
    "boost": Package(id="boost", name="Boost Package", price=3499, credits=250),
    "platinum": Package(id="platinum", name="Platinum Package", price=4999, credits=400),
    "vip": Package(id="vip", name="VIP Package", price=5999, credits=500),
}


def lookup(package_id: Optional[str]) -> Optional[Package]:
    if not package_id:
        return None
    return PACKAGES.get(package_id)


def get_package(package_id: Optional[str]) -> Package:
    """Resolve a package or raise InvalidPackageException."""
    package = lookup(package_id)
    if package is None:
        raise InvalidPackageException(package_id)
    return package


def list_packages() -> Dict[str, Package]:
    return dict(PACKAGES)
