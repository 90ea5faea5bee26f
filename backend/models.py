import uuid
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, String, Text

from database import Base


class Song(Base):
    __tablename__ = "songs"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    status = Column(String, nullable=False, default="CREATED")
    original_filename = Column(String, nullable=False)
    title = Column(String, nullable=True)
    file_path = Column(String, nullable=False)
    key = Column(String, nullable=True)
    melody = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    error = Column(Text, nullable=True)

    @property
    def display_name(self) -> str:
        return self.title or self.original_filename or "Unknown Song"
