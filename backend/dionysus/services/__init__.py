# Services package init
"""
Dionysus Backend — Services Layer
===================================

Service Inventory:
    - EmailClient (abstract): single-attempt email transport
    - ResendEmailClient: EmailClient over the Resend HTTP API
    - AuthNotificationService: renders auth alerts and delivers them with retry
    - UserService: upserts users after identity-provider sign-in
"""
