from twotruths import db
from datetime import datetime, timezone
import uuid


def _new_id():
    return uuid.uuid4().hex


def _utcnow():
    return datetime.now(timezone.utc)


class User(db.Model):
    __tablename__ = 'user'
    # Identifier handed over by the authentication layer (e.g. a Farcaster fid)
    id = db.Column(db.String(64), primary_key=True)
    username = db.Column(db.String(128), nullable=False)
    total_points = db.Column(db.Integer, default=0, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow, nullable=False)


class Statement(db.Model):
    __tablename__ = 'statement'
    id = db.Column(db.String(32), primary_key=True, default=_new_id)
    user_id = db.Column(db.String(64), db.ForeignKey('user.id'), nullable=False, index=True)
    text = db.Column(db.Text, nullable=False)
    is_lie = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow, nullable=False)


class Guess(db.Model):
    __tablename__ = 'guess'
    id = db.Column(db.String(32), primary_key=True, default=_new_id)
    user_id = db.Column(db.String(64), db.ForeignKey('user.id'), nullable=False, index=True)
    statement_id = db.Column(db.String(32), db.ForeignKey('statement.id'), nullable=False)
    is_correct = db.Column(db.Boolean, nullable=False)
    points_earned = db.Column(db.Integer, default=0, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow, nullable=False)
