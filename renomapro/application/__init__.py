"""
===============================================================================
APPLICATION LAYER (Public API / Exports)
===============================================================================

Expone los componentes de aplicación:
  - CredentialStore: identidad, rol y vinculación de billing
  - SubscriptionReconciler: checkout de Stripe + eventos de webhook
  - ProviderDirectory: directorio de fachowcy con regla de ownership
  - ensure_dev_admin: seed del admin de desarrollo
===============================================================================
"""

from .credential_store import CredentialStore, normalize_email
from .dev_seed_admin import ensure_dev_admin
from .directory import ProviderDirectory, owner_stats
from .subscription_reconciler import (
    EventOutcome,
    SubscriptionReconciler,
    WebhookSettings,
)

__all__ = [
    "CredentialStore",
    "normalize_email",
    "SubscriptionReconciler",
    "WebhookSettings",
    "EventOutcome",
    "ProviderDirectory",
    "owner_stats",
    "ensure_dev_admin",
]
