"""
唯一键模型

每个受唯一约束的字段值占一行，插入时由数据库原子地拒绝重复
"""
from sqlalchemy import Column, BigInteger, Integer, String, UniqueConstraint
from app.db.database import Base


class DocumentUniqueKey(Base):
    __tablename__ = "document_unique_keys"
    __table_args__ = (
        UniqueConstraint("collection", "field", "value", name="uq_unique_keys_value"),
    )

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    collection = Column(String(64), nullable=False)
    field = Column(String(64), nullable=False)
    value = Column(String(255), nullable=False)
    document_id = Column(String(36), nullable=False, index=True)
