"""Lighthouse Score SQLAlchemy Model

One row per successful PageSpeed analysis. Rows are insert-only.
"""

from sqlalchemy import Column, DateTime, Float, Index, Integer, String, func

from speedboard.lib.database import Base


class LighthouseScore(Base):
    """Parsed Lighthouse metrics for one analysis.

    Table: lighthouse_scores

    Columns:
        id: Auto-incremented primary key, assigned by the store
        created_at: Insert time, assigned by the store
        url: Tested URL
        device_strategy: 'desktop' or 'mobile'
        first_content_paint: Seconds
        speed_index: Seconds
        largest_content_paint: Seconds
        total_blocking_time: Milliseconds
        time_to_interactive: Seconds
    """

    __tablename__ = 'lighthouse_scores'

    id = Column(Integer, primary_key=True, autoincrement=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    url = Column(String(2048), nullable=True)
    device_strategy = Column(String(16), nullable=True)
    first_content_paint = Column(Float, nullable=False, default=0.0)
    speed_index = Column(Float, nullable=False, default=0.0)
    largest_content_paint = Column(Float, nullable=False, default=0.0)
    total_blocking_time = Column(Float, nullable=False, default=0.0)
    time_to_interactive = Column(Float, nullable=False, default=0.0)

    __table_args__ = (
        Index('ix_lighthouse_scores_created_at', 'created_at'),
        Index('ix_lighthouse_scores_url', 'url'),
    )

    def __repr__(self) -> str:
        return (
            f"<LighthouseScore(id={self.id}, url='{self.url}', "
            f"device_strategy='{self.device_strategy}')>"
        )
