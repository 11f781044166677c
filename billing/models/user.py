from datetime import datetime
from werkzeug.security import generate_password_hash, check_password_hash
from billing import db

class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    login_id = db.Column(db.String(128), unique=True, nullable=False)
    display_name = db.Column(db.String(128), nullable=False)
    email = db.Column(db.String(255), nullable=True)
    password_hash = db.Column(db.String(256), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    def to_summary(self):
        # 参照先として埋め込む最小情報
        return {"id": self.id, "name": self.display_name, "email": self.email}

    def to_dict(self):
        return {
            "id": self.id,
            "loginId": self.login_id,
            "name": self.display_name,
            "email": self.email,
            "isActive": bool(self.is_active),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<User {self.login_id}>"
