# Routes package init
"""
Top.gg Client - Receiver App Routes
===================================

Route Inventory:
    - health.py:  GET  /health                  (service health check)
    - votes.py:   GET  /api/votes/{user_id}     (has the user voted?)
                  GET  /api/weekend             (weekend multiplier active?)
                  GET  /api/stats               (bot statistics on Top.gg)
                  POST {webhook_path}           (receive_vote, behind TopggWebhookMiddleware)

Routes stay thin: pull the client off ``app.state``, make one call, shape the
answer. Client errors propagate to the handlers registered in ``main``.
"""
