"""
Household Models

Contains the Household, User and Store models. Every other row in the
application is scoped to a household.
"""

from datetime import datetime

from .base import db


class Household(db.Model):
    """A family sharing recipes, weekly plans and grocery lists."""
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    members = db.relationship('User', backref='household', lazy=True)

    def __repr__(self):
        return f"<Household {self.id}: {self.name}>"


class User(db.Model):
    """Household member, identified by the email on the session."""
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    name = db.Column(db.String(100), default='')
    household_id = db.Column(db.Integer, db.ForeignKey('household.id'), nullable=True, index=True)

    def __repr__(self):
        return f"<User {self.id}: {self.email}>"


class Store(db.Model):
    """Preferred store an ingredient is usually bought at."""
    id = db.Column(db.Integer, primary_key=True)
    household_id = db.Column(db.Integer, db.ForeignKey('household.id'), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
