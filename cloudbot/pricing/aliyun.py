"""Aliyun ECS price client.

Calls the ECS RPC API (``DescribePrice``) with the signature version 1.0
scheme: sorted, percent-encoded query, ``GET&%2F&<encoded query>`` as the
string to sign, HMAC-SHA1 keyed with ``secret + "&"``.
"""

import base64
import hashlib
import hmac
import uuid
from datetime import UTC, datetime
from typing import Any
from urllib.parse import quote

import httpx

from cloudbot.credentials.store import CredentialStore
from cloudbot.domain.pricing import PriceQuote
from cloudbot.errors import (
    AuthMissingError,
    QuoteNotFoundError,
    TransientError,
)
from cloudbot.observability.logging import get_logger
from cloudbot.pricing.base import PriceQuoteClient

logger = get_logger(__name__)

API_VERSION = "2014-05-26"

AUTH_ERROR_CODES = frozenset({
    "InvalidAccessKeyId",
    "InvalidAccessKeyId.NotFound",
    "InvalidAccessKeyId.Inactive",
    "SignatureDoesNotMatch",
    "IncompleteSignature",
    "Forbidden.RAM",
    "Forbidden.AccessKeyDisabled",
})

TRANSIENT_ERROR_CODES = frozenset({
    "Throttling",
    "Throttling.User",
    "Throttling.Api",
    "ServiceUnavailable",
    "InternalError",
})


def percent_encode(value: str) -> str:
    """RFC 3986 encoding as the RPC signature requires."""
    return quote(str(value), safe="~")


def sign_parameters(params: dict[str, str], secret_key: str, method: str = "GET") -> str:
    """Compute the RPC request signature for ``params``.

    Args:
        params: Request parameters, excluding Signature
        secret_key: Account AccessKey secret
        method: HTTP method the request is sent with

    Returns:
        Base64 HMAC-SHA1 of the canonicalised request
    """
    canonical = "&".join(
        f"{percent_encode(key)}={percent_encode(params[key])}" for key in sorted(params)
    )
    string_to_sign = f"{method}&{percent_encode('/')}&{percent_encode(canonical)}"
    digest = hmac.new(
        f"{secret_key}&".encode(),
        string_to_sign.encode(),
        hashlib.sha1,
    ).digest()
    return base64.b64encode(digest).decode()


class AliyunPriceClient(PriceQuoteClient):
    """Live pay-as-you-go prices from the Aliyun ECS API, in CNY."""

    def __init__(
        self,
        credentials: CredentialStore,
        endpoint: str = "https://ecs.aliyuncs.com",
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._credentials = credentials
        self._endpoint = endpoint
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def provider_name(self) -> str:
        return "aliyun"

    async def quote(self, region: str, instance_type: str) -> PriceQuote:
        data = await self._call(
            {
                "Action": "DescribePrice",
                "RegionId": region,
                "InstanceType": instance_type,
                "PriceUnit": "Hour",
            },
            region=region,
            instance_type=instance_type,
        )

        price = data.get("PriceInfo", {}).get("Price", {})
        price_per_hour = (
            float(price.get("TradePrice") or 0)
            or float(price.get("OriginalPrice") or 0)
            or float(price.get("DiscountPrice") or 0)
        )
        if price_per_hour <= 0:
            raise QuoteNotFoundError(
                f"No valid price for {instance_type} in {region}",
                provider=self.provider_name,
                region=region,
                instance_type=instance_type,
            )

        return PriceQuote(
            provider=self.provider_name,
            region=region,
            instance_type=instance_type,
            price_per_hour=price_per_hour,
            currency=price.get("Currency") or "CNY",
        )

    async def list_regions(self) -> list[str]:
        data = await self._call({"Action": "DescribeRegions"})
        return [r["RegionId"] for r in data.get("Regions", {}).get("Region", []) if "RegionId" in r]

    async def list_instance_types(self, region: str) -> list[str]:
        data = await self._call(
            {"Action": "DescribeInstanceTypes", "RegionId": region}, region=region
        )
        return [
            t["InstanceTypeId"]
            for t in data.get("InstanceTypes", {}).get("InstanceType", [])
            if "InstanceTypeId" in t
        ]

    async def aclose(self) -> None:
        await self._client.aclose()

    def _signed_params(self, params: dict[str, str]) -> dict[str, str]:
        creds = self._credentials.get(self.provider_name)
        if creds is None:
            raise AuthMissingError("No aliyun credentials configured", provider=self.provider_name)

        signed = {
            **params,
            "Version": API_VERSION,
            "Format": "JSON",
            "AccessKeyId": creds.access_key.get_secret_value(),
            "SignatureMethod": "HMAC-SHA1",
            "SignatureVersion": "1.0",
            "SignatureNonce": uuid.uuid4().hex,
            "Timestamp": datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ"),
        }
        signed["Signature"] = sign_parameters(signed, creds.secret_key.get_secret_value())
        return signed

    async def _call(
        self,
        params: dict[str, str],
        *,
        region: str | None = None,
        instance_type: str | None = None,
    ) -> dict[str, Any]:
        context = {"provider": self.provider_name, "region": region, "instance_type": instance_type}
        signed = self._signed_params(params)

        logger.debug("aliyun_api_request", action=params["Action"], region=region)
        try:
            response = await self._client.get(self._endpoint, params=signed)
        except httpx.HTTPError as e:
            raise TransientError(f"Aliyun request failed: {e}", **context) from e

        try:
            data: dict[str, Any] = response.json()
        except ValueError:
            data = {}

        code = data.get("Code")
        status = response.status_code
        if status == 429 or status >= 500 or code in TRANSIENT_ERROR_CODES:
            raise TransientError(
                f"Aliyun API unavailable ({response.status_code}): {code or response.text}",
                **context,
            )
        if response.status_code in (401, 403) or code in AUTH_ERROR_CODES:
            logger.error("aliyun_auth_rejected", code=code, status_code=response.status_code)
            raise AuthMissingError(f"Aliyun rejected credentials: {code}", **context)
        if code or response.status_code != 200:
            raise QuoteNotFoundError(
                f"Aliyun API error {code}: {data.get('Message', response.text)}",
                **context,
            )
        return data
