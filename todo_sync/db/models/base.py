"""
SQLAlchemy 声明基类：所有模型继承此 Base
"""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

# 约束统一命名，便于排查 IntegrityError 时定位到具体约束
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """声明基类"""

    __abstract__ = True

    metadata = MetaData(naming_convention=NAMING_CONVENTION)
