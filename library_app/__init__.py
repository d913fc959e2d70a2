from flask import Flask, jsonify

from library_app.clock import SystemClock
from library_app.config import Config
from library_app.errors import LibraryError
from library_app.extensions import db, migrate, jwt, mail
from library_app.utils.responses import fail


def register_error_handlers(app):
    @app.errorhandler(LibraryError)
    def handle_library_error(err: LibraryError):
        if err.status_code >= 500:
            app.logger.error(f"[api] {type(err).__name__}: {err.message}")
        return fail(err.message, err.status_code)


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    mail.init_app(app)

    # models must be imported before create_all / migrations see the metadata
    from library_app.models import book, borrow, fine, notification_log, user  # noqa: F401
    from library_app.services.mail_service import MailService

    # collaborators the lending core resolves at call time; tests swap them
    app.extensions["clock"] = SystemClock()
    app.extensions["notifier"] = MailService()

    register_error_handlers(app)

    from library_app.controllers.auth_controller import auth_bp
    from library_app.controllers.book_controller import book_bp
    from library_app.controllers.borrow_controller import borrow_bp
    from library_app.controllers.fine_controller import fine_bp
    from library_app.controllers.notification_controller import notif_bp
    from library_app.controllers.user_controller import user_bp
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(book_bp, url_prefix="/books")
    app.register_blueprint(borrow_bp, url_prefix="/borrow")
    app.register_blueprint(fine_bp, url_prefix="/fines")
    app.register_blueprint(notif_bp, url_prefix="/notifications")
    app.register_blueprint(user_bp, url_prefix="/users")

    @app.get("/health")
    def health():
        return jsonify({"ok": True})

    from library_app.tasks.scheduler import start_scheduler
    start_scheduler(app)

    return app
