from library_app.extensions import db
from library_app.models.user import User


class UserRepo:
    @staticmethod
    def get_by_username(username: str):
        return User.query.filter_by(username=username).first()

    @staticmethod
    def get_by_email(email: str):
        return User.query.filter_by(email=email).first()

    @staticmethod
    def get_by_id(user_id: int):
        return db.session.get(User, user_id)

    @staticmethod
    def get_for_update(user_id: int):
        # serializes eligibility checks of the same user
        return (
            User.query
            .filter(User.id == user_id)
            .with_for_update()
            .populate_existing()
            .first()
        )

    @staticmethod
    def create(user: User):
        db.session.add(user)
        db.session.commit()
        return user
