from datetime import datetime
from sqlalchemy.orm import Session
from models.auth_token import AuthToken


def get_token(db: Session, token: str):
    return db.query(AuthToken).filter(AuthToken.token == token).first()


def create_token(db: Session, user_id: str, token: str, expires_at: datetime):
    t = AuthToken(user_id=user_id, token=token, expires_at=expires_at)
    db.add(t)
    db.commit()
    db.refresh(t)
    return t
