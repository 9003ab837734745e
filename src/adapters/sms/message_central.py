"""
Message Central adapter - Implements VerificationProvider protocol.

Wraps the two verification endpoints of the Message Central v3 API:

- POST {base}/send         issue a one-time code, returns a verification id
- GET  {base}/validateOtp  check a code against a verification id

Error classification:
- timeout                        -> ProviderTimeout
- transport error, non-2xx,
  non-JSON or non-object body    -> ProviderError
- 2xx with no validity signal    -> VerificationOutcome(valid=False)

Only the last case means the provider said "wrong code"; everything else
means validity is unknown. Calls are never retried here: a repeated send
would deliver a second real SMS.
"""

import logging
from typing import Any

import httpx

from src.domain.exceptions import ProviderError, ProviderTimeout
from src.domain.ports import VerificationOutcome

from .extraction import extract_session_ref, match_validity

logger = logging.getLogger(__name__)


class MessageCentralClient:
    """
    Implements VerificationProvider protocol via httpx.

    Uses structural subtyping - no explicit inheritance from Protocol.
    The httpx.Client carries the base URL, auth header and timeout.
    """

    def __init__(self, client: httpx.Client, customer_id: str) -> None:
        self._client = client
        self._customer_id = customer_id

    @classmethod
    def from_settings(
        cls, base_url: str, customer_id: str, auth_token: str, timeout_seconds: float
    ) -> "MessageCentralClient":
        """
        Build a client whose every phase is bounded by timeout_seconds.

        httpx applies the timeout per phase (pool wait, connect, write, and
        each read), not to the call as a whole. A single call can therefore
        take several multiples of timeout_seconds, and a provider that keeps
        trickling bytes can hold it longer still. The route runs in the
        threadpool, so a slow provider ties up one worker, not the event loop.
        """
        client = httpx.Client(
            base_url=base_url,
            headers={"authToken": auth_token},
            timeout=httpx.Timeout(
                connect=timeout_seconds,
                read=timeout_seconds,
                write=timeout_seconds,
                pool=timeout_seconds,
            ),
        )
        return cls(client, customer_id)

    def close(self) -> None:
        self._client.close()

    def issue(self, mobile_number: str, country_code: str, channel: str) -> str:
        """
        Send a one-time code to mobile_number.

        Returns:
            Provider verification id (as str)

        Raises:
            ProviderTimeout: No answer within the client timeout
            ProviderError: Call failed or the body carried no verification id
        """
        params = {
            "countryCode": country_code,
            "customerId": self._customer_id,
            "flowType": channel,
            "mobileNumber": mobile_number,
        }
        payload = self._request("POST", "/send", params)
        session_ref, rule = extract_session_ref(payload)
        if session_ref is None:
            logger.error("Send response carried no verification id: keys=%s", sorted(payload))
            raise ProviderError("no verification id in send response")
        logger.info("Code issued via %s channel (ref from %s)", channel, rule)
        return session_ref

    def validate(
        self, mobile_number: str, session_ref: str, code: str, country_code: str
    ) -> VerificationOutcome:
        """
        Check code against the verification session.

        Raises:
            ProviderTimeout: No answer within the client timeout
            ProviderError: Call failed, validity unknown
        """
        params = {
            "countryCode": country_code,
            "mobileNumber": mobile_number,
            "verificationId": session_ref,
            "customerId": self._customer_id,
            "code": code,
        }
        payload = self._request("GET", "/validateOtp", params)
        rule = match_validity(payload)
        logger.info("Validation answered: %s", "VALID" if rule else "INVALID")
        return VerificationOutcome(valid=rule is not None, matched_rule=rule)

    def _request(self, method: str, path: str, params: dict[str, str]) -> dict[str, Any]:
        try:
            response = self._client.request(method, path, params=params)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.error("Message Central %s %s timed out", method, path)
            raise ProviderTimeout(f"{path} timed out") from e
        except httpx.HTTPStatusError as e:
            logger.error(
                "Message Central %s %s failed: %s - %s",
                method,
                path,
                e.response.status_code,
                e.response.text[:500],
            )
            raise ProviderError(f"{path} returned {e.response.status_code}", e.response.status_code) from e
        except httpx.HTTPError as e:
            logger.error("Message Central %s %s transport error: %s", method, path, e)
            raise ProviderError(f"{path} transport error") from e

        try:
            payload = response.json()
        except ValueError as e:
            raise ProviderError(f"{path} returned a non-JSON body", response.status_code) from e
        if not isinstance(payload, dict):
            raise ProviderError(f"{path} returned a non-object body", response.status_code)
        return payload
