from library_app.extensions import db
from library_app.models.fine import Fine, FineStatus


class FineRepo:
    @staticmethod
    def has_pending(user_id: int) -> bool:
        return Fine.query.filter_by(user_id=user_id, status=FineStatus.PENDING).first() is not None

    @staticmethod
    def create(fine: Fine):
        db.session.add(fine)
        db.session.flush()
        return fine

    @staticmethod
    def list_by_user(user_id: int, status: str | None = None):
        q = Fine.query.filter(Fine.user_id == user_id)
        if status:
            q = q.filter(Fine.status == status)
        return q.order_by(Fine.created_at.desc(), Fine.id.desc()).all()

    @staticmethod
    def get_pending_for_update(user_id: int, fine_id: int):
        return (
            Fine.query
            .filter(
                Fine.id == fine_id,
                Fine.user_id == user_id,
                Fine.status == FineStatus.PENDING,
            )
            .with_for_update()
            .populate_existing()
            .first()
        )
