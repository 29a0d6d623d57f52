from sqlalchemy.orm import Session
from models.user import User
from models.enums import Role


def get_user(db: Session, user_id: str):
    return db.query(User).filter(User.id == user_id).first()


def list_users_by_ids(db: Session, user_ids, role: Role | None = None):
    q = db.query(User).filter(User.id.in_(list(user_ids)))
    if role is not None:
        q = q.filter(User.role == role.value)
    return q.all()


def create_user(db: Session, email: str, role: Role, name: str | None = None):
    user = User(email=email, name=name, role=role.value)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user
