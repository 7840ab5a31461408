"""
exposure_engine/report/mailer.py — Gmail SMTP mailer with dry-run support.

GmailMailer sends (or simulates sending) report emails and logs every
attempt to the database via the repository layer.
"""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from sqlalchemy.orm import Session

from exposure_engine.config import settings
from exposure_engine.db import repository
from exposure_engine.db.models import DeliveryStatus
from exposure_engine.report.templates import RenderedEmail

logger = logging.getLogger(__name__)

GMAIL_SMTP_HOST = "smtp.gmail.com"
GMAIL_SMTP_PORT = 465  # SSL


class GmailMailer:
    """
    Sends report emails via Gmail SMTP using an App Password.

    In dry-run mode (MAILER_DRY_RUN=true) emails are printed to stdout
    and never transmitted.
    """

    def __init__(self, dry_run: Optional[bool] = None):
        self.smtp_user = settings.gmail_user
        self.smtp_password = settings.gmail_app_password
        self.dry_run = dry_run if dry_run is not None else settings.mailer_dry_run

    def send(
        self,
        db: Session,
        assessment_id: int,
        to_address: str,
        email: RenderedEmail,
    ) -> bool:
        """
        Send (or simulate) one report email and log it to the DB.

        Args:
            db:            Active SQLAlchemy session.
            assessment_id: ID of the Assessment being reported.
            to_address:    Recipient email address.
            email:         Rendered email (subject + html + plain bodies).

        Returns:
            True on success (real send or dry-run), False on send failure.
        """
        record = repository.log_report_email(
            db=db,
            assessment_id=assessment_id,
            to_address=to_address,
            subject=email.subject,
            body=email.plain_body,
            delivery_status=DeliveryStatus.PENDING,
        )

        if self.dry_run:
            self._print_dry_run(to_address, email)
            repository.update_email_delivery_status(db, record.id, DeliveryStatus.SENT)
            db.commit()
            logger.info("DRY RUN: report for assessment %d to %s logged (not sent).", assessment_id, to_address)
            return True

        try:
            self._send_via_smtp(to_address, email)
        except (smtplib.SMTPException, OSError) as exc:
            repository.update_email_delivery_status(
                db, record.id, DeliveryStatus.FAILED, error_message=str(exc)
            )
            db.commit()
            logger.error("Failed to send report to %s: %s", to_address, exc)
            return False

        repository.update_email_delivery_status(db, record.id, DeliveryStatus.SENT)
        db.commit()
        logger.info("Report sent to %s (assessment_id=%d).", to_address, assessment_id)
        return True

    def _send_via_smtp(self, to_address: str, email: RenderedEmail) -> None:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = email.subject
        msg["From"] = self.smtp_user
        msg["To"] = to_address

        # Clients prefer the last part, so HTML goes second
        msg.attach(MIMEText(email.plain_body, "plain", "utf-8"))
        msg.attach(MIMEText(email.html_body, "html", "utf-8"))

        with smtplib.SMTP_SSL(GMAIL_SMTP_HOST, GMAIL_SMTP_PORT) as server:
            server.login(self.smtp_user, self.smtp_password)
            server.sendmail(self.smtp_user, to_address, msg.as_string())

    @staticmethod
    def _print_dry_run(to_address: str, email: RenderedEmail) -> None:
        separator = "─" * 60
        print(f"\n{separator}")
        print("  DRY RUN: report email not sent")
        print(separator)
        print(f"  To      : {to_address}")
        print(f"  Subject : {email.subject}")
        print(separator)
        print(email.plain_body)
        print(f"{separator}\n")
