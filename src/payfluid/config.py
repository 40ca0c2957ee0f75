"""Endpoint configuration for the PayFluid API."""

from dataclasses import dataclass


TEST_BASE_URL = "https://payfluid-api.herokuapp.com/payfluid/ext/api"
LIVE_BASE_URL = "https://www.payoutlet.com.gh/payfluid/ext/api"

DEFAULT_TIMEOUT = 30


@dataclass(frozen=True)
class Endpoints:
    """The three URLs the client talks to."""

    secure_credentials: str
    payment_link: str
    payment_status: str

    @classmethod
    def from_base_url(cls, base_url: str, status_url: str = None) -> "Endpoints":
        """Build the endpoint set rooted at ``base_url``.

        The status endpoint lives on the live host in both environments, so it
        can be given separately.
        """
        base_url = base_url.rstrip("/")
        return cls(
            secure_credentials=f"{base_url}/secureCredentials",
            payment_link=f"{base_url}/getPayLink",
            payment_status=status_url or f"{base_url}/status?msg",
        )

    @classmethod
    def for_environment(cls, live: bool) -> "Endpoints":
        return cls.LIVE if live else cls.TEST


Endpoints.TEST = Endpoints.from_base_url(TEST_BASE_URL, status_url=f"{LIVE_BASE_URL}/status?msg")
Endpoints.LIVE = Endpoints.from_base_url(LIVE_BASE_URL)
