"""
Payments app for gateway webhooks.

This app handles:
- Signature verification and storage of gateway webhook deliveries
- Idempotent Payment creation, one row per order and gateway payment id
- Proportional settlement of grouped (multi-organization) checkouts
- Cancelling unpaid orders when a payment fails

Related apps:
    - orders: Order State Machine drives every order transition
    - audit: SYSTEM_EVENT entries for received and failed payments

Usage:
    from payments.processor import PaymentWebhookProcessor

    outcome = PaymentWebhookProcessor.handle_payment_webhook(event)
"""
