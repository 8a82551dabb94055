# --- laundrydesk/model/user.py ---
from werkzeug.security import check_password_hash, generate_password_hash

from ..extensions import db
from ..utils.dates import utcnow

ROLES = ("admin", "manager", "cashier", "processor")

class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    full_name = db.Column(db.String(180), nullable=False)
    password_hash = db.Column(db.String(255), nullable=False, default="")
    role = db.Column(db.String(20), nullable=False, default="cashier", index=True)
    branch_id = db.Column(db.Integer, db.ForeignKey("branches.id"), nullable=True, index=True)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=utcnow)
    last_login = db.Column(db.DateTime)

    branch = db.relationship("Branch")

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password) -> bool:
        return bool(self.password_hash) and check_password_hash(self.password_hash, password)

    def as_dict(self):
        return {
            "id": self.id,
            "username": self.username,
            "full_name": self.full_name,
            "role": self.role,
            "branch_id": self.branch_id,
            "branch_name": self.branch.name if self.branch else None,
        }
