"""
Flask extensions shared by the app factory and the blueprints.
"""

from flask_bcrypt import Bcrypt
from flask_socketio import SocketIO
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

bcrypt = Bcrypt()

socketio = SocketIO()
