from sqlalchemy import BigInteger, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from catalog.database import Base


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------
class ServiceRecord(Base):
    __tablename__ = "services"

    # BIGINT holds every id up to MAX_SERVICE_ID; SQLite needs INTEGER for its rowid alias.
    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    versions: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
