from flask import Blueprint, jsonify

from library_app.repositories.notification_repo import NotificationRepo
from library_app.services.reminder_service import ReminderService
from library_app.utils.decorators import role_required

notif_bp = Blueprint("notifications", __name__)


@notif_bp.post("/run-reminders")
@role_required("admin")
def run_reminders():
    count = ReminderService.scan_due_tomorrow()
    return jsonify({"success": True, "processed": count})


@notif_bp.get("/logs")
@role_required("admin")
def recent_logs():
    rows = NotificationRepo.list_recent()
    return jsonify({"success": True, "data": [
        {
            "id": n.id,
            "type": n.type,
            "borrow_id": n.borrow_id,
            "email": n.email,
            "success": n.success,
            "error": n.error_message,
            "sent_at": n.sent_at.isoformat(),
        } for n in rows
    ]})
