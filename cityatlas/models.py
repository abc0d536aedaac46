import datetime

from sqlalchemy import Column, DateTime, String

from .db import Base


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


# ==== favorites ====
class FavoriteCity(Base):
    """A row's presence marks the city as a favorite; deleting it unfavorites the city."""

    __tablename__ = "favorite_cities"

    city_id = Column(String, primary_key=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self):
        return f"<{type(self).__name__} city_id={self.city_id!r} created_at={self.created_at!r}>"
