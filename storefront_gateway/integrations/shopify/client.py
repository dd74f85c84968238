import requests
import logging
from typing import Any, Dict, Optional

from ...errors import UpstreamError

logger = logging.getLogger(__name__)


class StorefrontClient:
    def __init__(self, shop_domain: str, api_version: str = "2024-04", timeout: float = 5.0):
        """
        Initialize the Storefront API client.
        Args:
            shop_domain: The myshopify.com domain (e.g., 'my-store.myshopify.com')
            This is NOT the custom domain - tokenless access is served from the Shopify domain
            api_version: Storefront API version, YYYY-MM
            timeout: Seconds to wait for the single upstream attempt
        """
        self.shop_domain = shop_domain
        self.api_version = api_version
        self.timeout = timeout
        # Tokenless requests need no access token header
        self.endpoint = f"https://{self.shop_domain}/api/{self.api_version}/graphql.json"

    def get_headers(self) -> dict:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json"
        }

    def execute(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict:
        """Run one GraphQL operation and return the decoded payload ({data} and/or {errors})."""
        try:
            response = requests.post(
                self.endpoint,
                headers=self.get_headers(),
                json={"query": query, "variables": variables or {}},
                timeout=self.timeout
            )
        except requests.exceptions.Timeout as e:
            logger.error(f"Storefront API request timed out after {self.timeout}s")
            raise UpstreamError(f"Storefront API request timed out after {self.timeout}s") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Storefront API request failed: {e}")
            raise UpstreamError(f"Storefront API request failed: {e}") from e

        if not response.ok:
            logger.error(f"Storefront API returned HTTP {response.status_code}")
            logger.error(f"Response: {response.text}")
            raise UpstreamError(
                f"Storefront API returned HTTP {response.status_code}",
                status=response.status_code,
                body=response.text
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamError(
                "Storefront API returned a non-JSON response",
                status=response.status_code,
                body=response.text
            ) from e

        if not isinstance(payload, dict):
            raise UpstreamError(
                "Storefront API returned an unexpected payload",
                status=response.status_code,
                body=response.text
            )

        if payload.get("errors"):
            logger.warning(f"Storefront API reported errors: {error_messages(payload)}")

        return payload


def error_messages(payload: Dict) -> str:
    """Join the GraphQL error messages of a payload."""
    errors = payload.get("errors") or []
    if isinstance(errors, dict):
        errors = [errors]
    return "; ".join(
        str(error.get("message", error)) if isinstance(error, dict) else str(error)
        for error in errors
    )


def require_field(payload: Dict, field: str, message: str) -> Any:
    """Return payload['data'][field] or raise UpstreamError when it is absent."""
    data = payload.get("data") or {}
    value = data.get(field)
    if value is None:
        details = error_messages(payload)
        raise UpstreamError(f"{message}: {details}" if details else message)
    return value
