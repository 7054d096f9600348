"""Webhook subscription handshake."""

import logfire

from src.constants import WEBHOOK_SUBSCRIBE_MODE
from src.logging_config import mask_pii


class VerificationForbiddenError(Exception):
    """Raised when mode/token are present but do not match configuration."""


class VerificationMissingParamsError(Exception):
    """Raised when the handshake is missing hub.mode or hub.verify_token."""


class WebhookVerifier:
    """Checks the platform's subscription handshake against our verify token.

    Example:
        >>> verifier = WebhookVerifier(verify_token="secret")
        >>> verifier.verify("subscribe", "secret", "1158201444")
        '1158201444'
    """

    def __init__(self, verify_token: str):
        if not verify_token:
            raise ValueError("verify_token is required")
        self._verify_token = verify_token

    def verify(
        self,
        mode: str | None,
        token: str | None,
        challenge: str | None,
    ) -> str:
        """Return the challenge to echo back if the handshake is valid.

        Args:
            mode: Value of hub.mode
            token: Value of hub.verify_token
            challenge: Value of hub.challenge

        Returns:
            The challenge string (empty if the platform sent none)

        Raises:
            VerificationMissingParamsError: mode or token is absent
            VerificationForbiddenError: mode is not "subscribe" or token mismatch
        """
        if not mode or not token:
            logfire.warning(
                "Webhook verification missing parameters",
                has_mode=bool(mode),
                has_token=bool(token),
            )
            raise VerificationMissingParamsError("hub.mode and hub.verify_token are required")

        if mode == WEBHOOK_SUBSCRIBE_MODE and token == self._verify_token:
            logfire.info("WEBHOOK_VERIFIED")
            return challenge or ""

        logfire.warning(
            "Webhook verification failed",
            mode=mode,
            token=mask_pii(token),
        )
        raise VerificationForbiddenError("verify token mismatch")
