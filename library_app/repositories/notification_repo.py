from library_app.extensions import db
from library_app.models.notification_log import NotificationLog


class NotificationRepo:
    @staticmethod
    def log(entry: NotificationLog):
        # no commit: the reminder scan commits once after its loop
        db.session.add(entry)
        return entry

    @staticmethod
    def list_recent(limit: int = 50):
        return NotificationLog.query.order_by(NotificationLog.id.desc()).limit(limit).all()
