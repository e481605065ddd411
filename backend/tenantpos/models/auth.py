from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z
from .mixins import SoftDeleteMixin, active_unique_index, soft_delete_check


class Account(SoftDeleteMixin, db.Model):
    """
    Login accounts for tenant staff and operators.

    MULTI-TENANT: Staff accounts belong to exactly one tenant (tenant_id).
    Email is unique within a tenant among non-deleted accounts, not globally.
    Operator accounts have no tenant (tenant_id NULL).
    """
    __tablename__ = "accounts"
    __unique_key__ = "email"
    __table_args__ = (
        active_unique_index("uq_accounts_tenant_email_active", "tenant_id", "email"),
        soft_delete_check("accounts"),
        db.CheckConstraint(
            "role = 'operator' OR tenant_id IS NOT NULL",
            name="ck_accounts_tenant_required",
        ),
        db.Index("ix_accounts_tenant_role", "tenant_id", "role"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("tenants.id"), nullable=True, index=True)

    email = db.Column(db.String(255), nullable=False, index=True)
    name = db.Column(db.String(120), nullable=False)
    role = db.Column(db.String(16), nullable=False)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )
    last_login_at = db.Column(db.DateTime(timezone=True), nullable=True)

    tenant = db.relationship("Tenant", backref=db.backref("accounts", lazy=True))

    def __repr__(self) -> str:
        return f"<Account id={self.id} email={self.email!r} role={self.role}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "is_active": self.is_active,
            "deleted_at": to_utc_z(self.deleted_at),
            "created_at": to_utc_z(self.created_at),
            "last_login_at": to_utc_z(self.last_login_at),
        }

    def to_summary(self) -> dict:
        return {"id": self.id, "name": self.name, "email": self.email, "role": self.role}


class SessionToken(db.Model):
    """
    Session token with the principal snapshot taken at issue time.

    role and tenant_id are copied from the account when the token is issued
    and never updated: a session always reflects the account as it was at
    login.

    SECURITY NOTES:
    - Tokens stored hashed in database (SHA-256)
    - Absolute and idle timeouts (see Config)
    - Revocable on logout or password change
    """
    __tablename__ = "session_tokens"
    __table_args__ = (
        db.Index("ix_session_tokens_account_active", "account_id", "is_revoked"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    account_id = db.Column(db.Integer, db.ForeignKey("accounts.id"), nullable=False, index=True)

    # Principal snapshot
    tenant_id = db.Column(db.Integer, db.ForeignKey("tenants.id"), nullable=True, index=True)
    role = db.Column(db.String(16), nullable=False)

    # Token hash (never store plaintext tokens!)
    token_hash = db.Column(db.String(255), nullable=False, unique=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    last_used_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    expires_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)

    user_agent = db.Column(db.String(512), nullable=True)
    ip_address = db.Column(db.String(45), nullable=True)

    is_revoked = db.Column(db.Boolean, nullable=False, default=False, index=True)
    revoked_at = db.Column(db.DateTime(timezone=True), nullable=True)
    revoked_reason = db.Column(db.String(255), nullable=True)

    account = db.relationship("Account", backref=db.backref("sessions", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "account_id": self.account_id,
            "tenant_id": self.tenant_id,
            "role": self.role,
            "created_at": to_utc_z(self.created_at),
            "last_used_at": to_utc_z(self.last_used_at),
            "expires_at": to_utc_z(self.expires_at),
        }
