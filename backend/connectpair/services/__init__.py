# Services package init
"""
ConnectPair Backend: Services Layer
====================================

What:  Business logic between the routes (HTTP) and the store (persistence).

Service Inventory:
    - ConsultationService: consultation pipeline + admin listing
    - NewsletterService: signup pipeline (insert-or-ignore + welcome email)
    - NumberService: read-only number search
    - Notifier: templated emails, best effort, never raises
    - MailTransport (abstract) / SMTPTransport: delivery backends

Services take their dependencies (session, notifier, background tasks) as
arguments, so they can be exercised without HTTP.
"""
