"""
SQLAlchemy ORM models for the order document store.

Orders are written once at checkout and never read back by the app.
Line items are kept as a JSON document so each order row is a complete
snapshot of the receipt.
"""

from sqlalchemy import JSON, Column, Integer, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String, index=True)         # ORD-NNNNN, not unique
    user_id = Column(String, index=True)
    items = Column(JSON, nullable=False)          # list of menu item dicts
    total = Column(Integer, nullable=False)       # subtotal, rupees
    gst = Column(Integer, nullable=False)
    final_total = Column(Integer, nullable=False)
    station = Column(String)
    coach = Column(String)
    status = Column(String, default="CONFIRMED")
    timestamp = Column(String)                    # receipt time, ISO 8601
    created_at = Column(String)                   # write time, ISO 8601
