"""
文档存储模型
"""
from sqlalchemy import Column, BigInteger, Integer, String, JSON, TIMESTAMP, UniqueConstraint, Index, func
from sqlalchemy.dialects.postgresql import JSONB
from app.db.database import Base


class StoredDocument(Base):
    __tablename__ = "documents"
    __table_args__ = (
        UniqueConstraint("collection", "document_id", name="uq_documents_collection_id"),
        Index("ix_documents_collection_created", "collection", "created_at"),
    )

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    collection = Column(String(64), nullable=False)
    document_id = Column(String(36), nullable=False)
    data = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False, default=dict)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
