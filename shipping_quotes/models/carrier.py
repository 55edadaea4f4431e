"""
Carrier identifiers and credentials

Supported carriers and the client-credentials pair each one is called with.
"""
from dataclasses import dataclass, field
import enum


class CarrierCode(str, enum.Enum):
    """
    Supported shipping carriers.

    Values are the carrier names exposed on quotes and warnings.
    """
    UPS = "UPS"
    FEDEX = "FedEx"

    @classmethod
    def from_hint(cls, value):
        """Resolve a case-insensitive selection hint ("ups", "fedex"), or None."""
        if value is None:
            return None
        normalized = str(value).strip().lower()
        for code in cls:
            if code.value.lower() == normalized:
                return code
        return None


@dataclass(frozen=True)
class CarrierCredentials:
    """OAuth client credentials for one carrier account."""
    client_id: str = ""
    client_secret: str = field(default="", repr=False)
    account_number: str = ""

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id) and bool(self.client_secret)

