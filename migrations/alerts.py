#!/usr/bin/env python3
"""
Failure alerts for migrations (Slack webhook)
"""

import logging
from typing import Optional, Sequence

import requests

logger = logging.getLogger(__name__)


def build_slack_payload(message: str, network: str, deployed: Sequence = ()) -> dict:
    """Slack message with one field per contract deployed before the failure"""
    fields = [
        {
            "title": "Network",
            "value": network,
            "short": True
        },
        {
            "title": "Deployed before failure",
            "value": str(len(deployed)),
            "short": True
        }
    ]
    for instance in deployed:
        fields.append({
            "title": instance.contract_name,
            "value": instance.address,
            "short": False
        })

    return {
        "text": f"WJ migration alert: {message}",
        "attachments": [{"fields": fields}]
    }


def send_alert(message: str, network: str, webhook_url: Optional[str], deployed: Sequence = ()) -> bool:
    """
    Report a migration failure

    The alert is always logged; it is also posted to Slack when a webhook is
    configured. Delivery problems are logged and never raised.

    Returns:
        True if the Slack webhook accepted the alert
    """
    logger.error(f"ALERT: {message}")

    if not webhook_url:
        return False

    try:
        response = requests.post(webhook_url, json=build_slack_payload(message, network, deployed), timeout=10)
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        logger.error(f"Failed to send Slack alert: {e}")
        return False
    return True
