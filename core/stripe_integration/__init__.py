"""
Stripe Integration Package
=============================================================

This package centralizes all Stripe-related logic of the portal backend.

Current Scope
--------------------
- Talks to Stripe through the official `stripe` SDK, wrapped by a single
  `StripeGateway` built at start-up.
- Provides API endpoints (see views.py) for:
  * Creating Checkout Sessions (one-time purchases and payment plans)
  * Verifying the browser return from Checkout
  * Receiving Stripe webhooks
- Reconciles webhook events into Purchase rows (see reconciler.py):
  * Purchase creation after a successful Checkout
  * Failed purchase records for async payment failures
  * Payment plan completion after the last installment invoice

Design Rationale
----------------
- Core placement: Located in `core/stripe_integration` so that billing is
  not tied to one product domain.
- Explicit mode: test vs live is resolved once into `StripeConfig` and the
  secret key and price ids of a checkout always come from the same mode.
- Idempotent webhooks: Stripe delivers at least once and in any order; the
  unique checkout session id and conditional updates make redelivery safe.

Structure
---------
- __init__.py     -> this file, documentation
- apps.py         -> App configuration (`StripeIntegrationConfig`), builds the gateway
- config.py       -> `StripeMode` and `StripeConfig`
- gateway.py      -> `StripeGateway`, every call to Stripe
- checkout.py     -> `CheckoutService`, validation and session creation
- reconciler.py   -> `WebhookReconciler`, event handlers
- views.py        -> API endpoints
- urls.py         -> Routes for the endpoints above
"""
