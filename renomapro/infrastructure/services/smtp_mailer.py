"""
===============================================================================
TARJETA CRC — infrastructure/services/smtp_mailer.py
===============================================================================

Componente:
    SmtpMailer (implementación de Mailer)

Responsabilidades:
    - Enviar notificaciones al destinatario configurado (NOTIFY_EMAIL).
    - STARTTLS en 587 o SSL directo (SMTP_SECURE=true).

Política:
    - Best-effort: cualquier falla se loguea y se retorna False; nunca lanza.
    - Sin SMTP_HOST no se abre ninguna conexión.
===============================================================================
"""

from __future__ import annotations

import smtplib
from email.message import EmailMessage

from ...crosscutting.logger import logger

DEFAULT_TIMEOUT_SECONDS = 10


class SmtpMailer:
    def __init__(
        self,
        *,
        host: str,
        port: int,
        secure: bool,
        user: str,
        password: str,
        sender: str,
        recipient: str,
    ) -> None:
        self._host = (host or "").strip()
        self._port = port
        self._secure = secure
        self._user = user
        self._password = password
        self._sender = sender
        self._recipient = (recipient or "").strip() or sender

    @classmethod
    def from_settings(cls, settings) -> "SmtpMailer":
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            secure=settings.smtp_secure,
            user=settings.smtp_user,
            password=settings.smtp_password,
            sender=settings.smtp_from,
            recipient=settings.notify_email,
        )

    def is_configured(self) -> bool:
        return bool(self._host)

    def _build_message(self, subject: str, body: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self._sender
        message["To"] = self._recipient
        message["Subject"] = subject
        message.set_content(body)
        return message

    def send(self, *, subject: str, body: str) -> bool:
        if not self.is_configured():
            logger.debug("SMTP no configurado; se omite el envío")
            return False

        message = self._build_message(subject, body)
        try:
            if self._secure:
                server = smtplib.SMTP_SSL(self._host, self._port, timeout=DEFAULT_TIMEOUT_SECONDS)
            else:
                server = smtplib.SMTP(self._host, self._port, timeout=DEFAULT_TIMEOUT_SECONDS)
            with server:
                if not self._secure:
                    server.starttls()
                if self._user:
                    server.login(self._user, self._password)
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error(
                "Error enviando mail",
                extra={"subject": subject, "error": str(exc)},
            )
            return False

        logger.info("Mail enviado", extra={"subject": subject})
        return True
