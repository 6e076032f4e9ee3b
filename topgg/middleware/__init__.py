# Middleware package init
"""
Top.gg Client - Receiver App Middleware
=======================================

Middleware Chain:
    Request → [Access Log] → Route Handler

The webhook middleware itself lives in ``topgg.webhook.middleware``; it is
part of the library surface, not of the receiver app.
"""
