"""Zip deployment of the demo site and the post-deploy notification."""

from shipit.deploy.notify import Notification, send_notification
from shipit.deploy.pipeline import DeployOutcome, DeployPipeline, DeployRequest, DeployState

__all__ = [
    "DeployOutcome",
    "DeployPipeline",
    "DeployRequest",
    "DeployState",
    "Notification",
    "send_notification",
]
