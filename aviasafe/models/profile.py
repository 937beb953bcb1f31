# aviasafe/models/profile.py
from sqlalchemy import Boolean, Column, DateTime, Integer, String, func

from aviasafe.db.base import Base


class Profile(Base):
    """
    A person using the system: reporters, investigators, safety officers, admins.
    """

    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True)

    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    full_name = Column(String(255), nullable=True)

    # admin | investigator | safety_officer | reporter
    role = Column(String(50), nullable=False, default="reporter", index=True)
    is_active = Column(Boolean, nullable=False, default=True)

    last_login_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<Profile id={self.id} email={self.email!r} role={self.role!r}>"
