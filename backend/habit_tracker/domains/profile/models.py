from sqlalchemy import Column, DateTime, String

from habit_tracker.core.database import Base


class Profile(Base):
    __tablename__ = "profiles"

    # id = 인증 서비스의 사용자 id (JWT sub)
    id = Column(String(64), primary_key=True)
    name = Column(String(100), nullable=True)
    avatar_url = Column(String(1024), nullable=True)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)
