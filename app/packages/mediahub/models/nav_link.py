"""站点导航链接模型。"""

from typing import Optional

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.packages.mediahub.models.base import Base, SoftDeleteMixin, TimestampMixin


class NavLink(TimestampMixin, SoftDeleteMixin, Base):
    """导航链接：``url`` 指向外部地址，``route`` 指向站内路由，二者只取其一。"""

    __tablename__ = "nav_links"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    label: Mapped[str] = mapped_column(String(100))
    url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    route: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    external: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
