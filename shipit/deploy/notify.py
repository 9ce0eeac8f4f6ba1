"""Deployment notification.

The payload uses the Slack incoming-webhook attachment format:

    {
      "username": "shipit",
      "attachments": [
        {
          "text": "A new version was deployed for antlr-calculator-demo",
          "color": "good",
          "fields": [{"title": "Version", "value": "1.2.0", "short": false}]
        }
      ]
    }
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from shipit.core.pipeline_errors import NotificationFailed
from shipit.core.result import Err, Ok, Result
from shipit.tools.http import HttpClient

__all__ = ["DEFAULT_SENDER", "Notification", "send_notification"]

DEFAULT_SENDER = "shipit"


@dataclass(frozen=True, slots=True)
class Notification:
    sender: str
    message: str
    color: str
    fields: tuple[tuple[str, str], ...]

    @classmethod
    def deployed(cls, *, sender: str, app: str, version: str) -> Notification:
        return cls(
            sender=sender,
            message=f"A new version was deployed for {app}",
            color="good",
            fields=(("Version", version),),
        )

    def payload(self) -> dict[str, Any]:
        return {
            "username": self.sender,
            "attachments": [
                {
                    "text": self.message,
                    "color": self.color,
                    "fields": [
                        {"title": title, "value": value, "short": False}
                        for title, value in self.fields
                    ],
                }
            ],
        }


def send_notification(
    http: HttpClient,
    webhook_url: str,
    notification: Notification,
) -> Result[None, NotificationFailed]:
    """Deliver one notification; any non-2xx answer is a failure."""
    result = http.post_json(webhook_url, notification.payload())
    if isinstance(result, Err):
        return Err(NotificationFailed(url=webhook_url, status=0, message=result.error.message))

    response = result.value
    if not response.is_success:
        return Err(
            NotificationFailed(url=webhook_url, status=response.status, message=response.body)
        )
    return Ok(None)
