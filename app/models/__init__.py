"""
RiskWise — Risk & Issue Dashboard
Model package. Exposes the shared SQLAlchemy handle.

Usage:
    from app.models import db
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
