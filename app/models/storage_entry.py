"""
Modèle SQLAlchemy pour la table storage_entries.
Équivalent serveur du localStorage : un blob texte (JSON) par clé.
"""

from sqlalchemy import Column, DateTime, String, Text, func

from app.database import Base


class StorageEntry(Base):
    __tablename__ = "storage_entries"

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
