"""
===============================================================================
TARJETA CRC — renomapro/container.py (Composition Root / DI manual)
===============================================================================

Responsabilidades:
  - Componer repositorios, servicios externos y componentes de aplicación.
  - Centralizar las decisiones runtime basadas en Settings:
      * APP_ENV=test       -> repositorios in-memory
      * FAKE_BILLING=true  -> FakeBillingGateway (sin red)
      * resto              -> Postgres + Stripe
  - Entregar un AppContainer explícito que vive en app.state.container.

Colaboradores:
  - crosscutting.config.Settings
  - infrastructure.repositories.{postgres,in_memory}
  - infrastructure.services.{StripeBillingGateway,FakeBillingGateway,SmtpMailer}
  - application.{CredentialStore,SubscriptionReconciler,ProviderDirectory}

Notas:
  - Este archivo NO contiene lógica de negocio.
  - Este archivo NO depende de FastAPI.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass

from .application.credential_store import CredentialStore
from .application.directory import ProviderDirectory
from .application.subscription_reconciler import SubscriptionReconciler, WebhookSettings
from .crosscutting.config import Settings
from .domain.repositories import (
    LeadRepository,
    OpinionRepository,
    ProviderRepository,
    UserRepository,
)
from .domain.services import BillingGateway, Mailer
from .infrastructure.repositories.in_memory import (
    InMemoryLeadRepository,
    InMemoryOpinionRepository,
    InMemoryProviderRepository,
    InMemoryUserRepository,
)
from .infrastructure.repositories.postgres import (
    PostgresLeadRepository,
    PostgresOpinionRepository,
    PostgresProviderRepository,
    PostgresUserRepository,
)
from .infrastructure.services import FakeBillingGateway, SmtpMailer, StripeBillingGateway


@dataclass
class AppContainer:
    settings: Settings
    user_repo: UserRepository
    provider_repo: ProviderRepository
    lead_repo: LeadRepository
    opinion_repo: OpinionRepository
    billing: BillingGateway
    mailer: Mailer
    credential_store: CredentialStore
    reconciler: SubscriptionReconciler
    directory: ProviderDirectory


def _build_billing(settings: Settings) -> BillingGateway:
    if settings.fake_billing:
        return FakeBillingGateway()
    return StripeBillingGateway(
        secret_key=settings.stripe_secret_key,
        price_id=settings.stripe_price_id,
    )


def build_container(
    settings: Settings,
    *,
    billing: BillingGateway | None = None,
    mailer: Mailer | None = None,
) -> AppContainer:
    """Arma el grafo de dependencias para un proceso (o un test)."""
    if settings.is_test():
        user_repo = InMemoryUserRepository()
        provider_repo = InMemoryProviderRepository()
        lead_repo = InMemoryLeadRepository()
        opinion_repo = InMemoryOpinionRepository()
    else:
        user_repo = PostgresUserRepository()
        provider_repo = PostgresProviderRepository()
        lead_repo = PostgresLeadRepository()
        opinion_repo = PostgresOpinionRepository()

    billing = billing or _build_billing(settings)
    mailer = mailer or SmtpMailer.from_settings(settings)

    store = CredentialStore(user_repo)
    reconciler = SubscriptionReconciler(
        store,
        billing,
        webhook=WebhookSettings(
            signing_secret=settings.stripe_webhook_secret,
            allow_unsigned=settings.stripe_webhook_allow_unsigned,
        ),
        public_base_url=settings.public_base_url,
    )
    directory = ProviderDirectory(
        provider_repo,
        store,
        ownership_enforced=settings.provider_ownership_enforced,
    )

    return AppContainer(
        settings=settings,
        user_repo=user_repo,
        provider_repo=provider_repo,
        lead_repo=lead_repo,
        opinion_repo=opinion_repo,
        billing=billing,
        mailer=mailer,
        credential_store=store,
        reconciler=reconciler,
        directory=directory,
    )
