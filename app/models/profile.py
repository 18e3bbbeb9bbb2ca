"""
Profile Model - Directory of user display names
"""
from sqlalchemy import Column, BigInteger, String
from atams.db import Base


class Profile(Base):
    """Profile model for workforce schema - Table: workforce.profiles"""
    __tablename__ = "profiles"
    __table_args__ = {"schema": "workforce"}

    pr_user_id = Column(BigInteger, primary_key=True, autoincrement=False)  # SSO users(u_id)
    pr_full_name = Column(String(255), nullable=True)
    pr_email = Column(String(255), nullable=True)
