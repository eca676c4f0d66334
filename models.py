from extensions import db


class User(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(80), nullable=False)
    email = db.Column(db.String(120), nullable=False, unique=True)
    password_hash = db.Column(db.String(128), nullable=False)
    role = db.Column(db.String(10), nullable=False, default='user')  # 'admin' or 'user'
    directory_id = db.Column(db.String(64), nullable=True)  # id in the external user directory
    last_login = db.Column(db.DateTime, nullable=True)

    def session_payload(self):
        return {
            'id': self.id,
            'directory_id': self.directory_id,
            'name': self.name,
            'email': self.email,
            'role': self.role,
        }
