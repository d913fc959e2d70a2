# library_app/services/mail_service.py
from __future__ import annotations

from flask import current_app
from flask_mail import Message

from library_app.extensions import mail
from library_app.models.notification_log import NotificationLog
from library_app.repositories.notification_repo import NotificationRepo


class MailService:
    """Notification sink backed by Flask-Mail; every attempt leaves a NotificationLog row."""

    @staticmethod
    def send_email(to_email: str, subject: str, body: str) -> tuple[bool, str | None]:
        """
        return: (success, error_text)
        """
        try:
            msg = Message(subject=subject, recipients=[to_email], body=body)
            mail.send(msg)
            return True, None
        except Exception as e:
            current_app.logger.warning(f"[mail] could not send to {to_email}: {e}")
            return False, str(e)

    @staticmethod
    def log_notification(
        borrow_id: int,
        notif_type: str,
        to_email: str | None,
        message: str,
        success: bool,
        error: str | None = None,
    ) -> NotificationLog:
        # no commit here: the caller owns the transaction
        return NotificationRepo.log(NotificationLog(
            borrow_id=borrow_id,
            type=notif_type,
            email=to_email,
            message=message,
            success=bool(success),
            error_message=error,
        ))

    def notify_due(self, user_email: str | None, book_title: str, due_date, borrow_id: int) -> bool:
        subject = "Book Due Reminder - Library"
        body = (
            "Hello,\n\n"
            f"'{book_title}' is due back on {due_date:%Y-%m-%d %H:%M} UTC.\n\n"
            "Please return or renew it in time to avoid a late fine.\n"
        )

        if not user_email:
            self.log_notification(borrow_id, "due_reminder", None, body, success=False, error="missing_email")
            return False

        ok, err = self.send_email(user_email, subject, body)
        self.log_notification(borrow_id, "due_reminder", user_email, body, success=ok, error=err)
        return ok
