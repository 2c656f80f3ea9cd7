from __future__ import annotations

from ..extensions import db
from catcoin.money import cents_to_amount


class DailyStat(db.Model):
    """
    Per-date rollup of committed sales.

    One row per calendar date, created lazily by the first sale of that date
    and incremented in place afterwards.
    """
    __tablename__ = "daily_stats"
    __table_args__ = (
        db.UniqueConstraint("date", name="uq_daily_stats_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # ISO YYYY-MM-DD so lexical order is chronological order
    date = db.Column(db.String(10), nullable=False)

    total_sales_cents = db.Column(db.Integer, nullable=False, default=0)
    order_count = db.Column(db.Integer, nullable=False, default=0)
    treats_eaten = db.Column(db.Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<DailyStat date={self.date} orders={self.order_count} total_cents={self.total_sales_cents}>"

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "total_sales": cents_to_amount(self.total_sales_cents),
            "order_count": self.order_count,
            "treats_eaten": self.treats_eaten,
        }

    @staticmethod
    def empty_dict(date: str) -> dict:
        return {"date": date, "total_sales": 0.0, "order_count": 0, "treats_eaten": 0}
