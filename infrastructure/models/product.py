"""
商品数据库模型
"""
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Numeric, DateTime, Text, Index

from .base import Base


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False, comment="商品名称")
    description = Column(Text, nullable=True, comment="商品描述")
    category = Column(String(100), nullable=True, index=True, comment="分类")
    price = Column(Numeric(precision=12, scale=2), nullable=False, comment="单价")
    image = Column(String(500), nullable=True, comment="图片地址")
    rating = Column(Numeric(precision=3, scale=2), nullable=False, default=0, comment="评分")
    reviews = Column(Integer, nullable=False, default=0, comment="评论数")
    status = Column(
        String(20),
        nullable=False,
        default="AVAILABLE",
        index=True,
        comment="状态: AVAILABLE/NOT_AVAILABLE",
    )
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_products_category_status", "category", "status"),
    )

    def __repr__(self):
        return f"<ProductModel(id={self.id}, name='{self.name}', price={self.price}, status='{self.status}')>"
