"""
Expo push notification client.

The mobile app registers Expo push tokens as devices; reminders are delivered
through the Expo push API, which fans out to APNs and FCM.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from services.parameter_store import ParameterStoreConfig, config as default_config

logger = logging.getLogger(__name__)

EXPO_PUSH_URL = "https://exp.host/--/api/v2/push/send"
# Expo accepts at most 100 messages per request.
EXPO_BATCH_SIZE = 100


class PushNotifier:
    def __init__(
        self,
        settings: Optional[ParameterStoreConfig] = None,
        offline: Optional[bool] = None,
        session: Optional[requests.Session] = None,
    ):
        self.settings = settings or default_config
        self.offline = self.settings.is_offline if offline is None else offline
        self.session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        token = self.settings.expo_access_token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def send(
        self,
        tokens: List[str],
        body: str,
        title: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Send one message per token.

        Returns:
            The push tickets returned by Expo, in token order
        """
        messages = []
        for token in tokens:
            message = {"to": token, "body": body, "sound": "default"}
            if title:
                message["title"] = title
            if data:
                message["data"] = data
            messages.append(message)

        if not messages:
            return []

        if self.offline:
            for message in messages:
                logger.info("Offline mode: push notification", extra={"push": message})
            return [{"status": "ok", "id": "offline"} for _ in messages]

        tickets: List[Dict[str, Any]] = []
        for start in range(0, len(messages), EXPO_BATCH_SIZE):
            response = self.session.post(
                EXPO_PUSH_URL,
                json=messages[start : start + EXPO_BATCH_SIZE],
                headers=self._headers(),
                timeout=10,
            )
            response.raise_for_status()
            tickets.extend(response.json().get("data", []))

        failed = [ticket for ticket in tickets if ticket.get("status") == "error"]
        if failed:
            logger.warning(
                "Some push notifications were rejected",
                extra={"failed_count": len(failed), "errors": failed},
            )
        return tickets
