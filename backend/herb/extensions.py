# Overview: Flask extension instances for the optional SQL document store.

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
