"""
Database Base Module

Holds the shared SQLAlchemy instance. Models and services import it from
here so neither has to import app.py.
"""

from flask_sqlalchemy import SQLAlchemy

# Bound to the Flask app by db.init_app() in app.py
db = SQLAlchemy()
