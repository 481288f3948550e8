"""Adaptadores de servicios externos (Stripe, SMTP) y sus dobles."""

from .fake_billing import FakeBillingGateway
from .smtp_mailer import SmtpMailer
from .stripe_billing import StripeBillingGateway

__all__ = ["StripeBillingGateway", "FakeBillingGateway", "SmtpMailer"]
