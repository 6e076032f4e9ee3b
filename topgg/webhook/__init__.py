"""
Top.gg Client - Webhook Layer
=============================

    verifier.py    verify_and_parse: authorize, read, parse, validate
    middleware.py  TopggWebhookMiddleware: verify, then forward
    listener.py    WebhookListener: verify, then dispatch to a handler
    responses.py   send-once response helpers
"""

from topgg.webhook.listener import WebhookListener, listener
from topgg.webhook.middleware import DEFAULT_ASSIGN_KEY, TopggWebhookMiddleware
from topgg.webhook.verifier import verify_and_parse

__all__ = [
    "DEFAULT_ASSIGN_KEY",
    "TopggWebhookMiddleware",
    "WebhookListener",
    "listener",
    "verify_and_parse",
]
