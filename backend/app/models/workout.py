from sqlalchemy import Column, Integer, String, Float, Boolean, Text, DateTime
from sqlalchemy.dialects.postgresql import JSONB
from datetime import datetime
from app.database import Base

WORKOUT_CATEGORIES = ("weight_loss", "progression", "beginner", "intermediate", "advanced", "free", "challenge")
WORKOUT_INTENSITIES = ("light", "moderate", "intense")

class Workout(Base):
    """Reusable walking workout definition (the catalog)."""
    __tablename__ = "workouts"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(150), nullable=False, index=True)
    description = Column(Text, nullable=True)
    type = Column(String(20), nullable=False, default="walk", index=True)
    category = Column(String(30), nullable=False, default="weight_loss", index=True)
    intensity = Column(String(20), nullable=False, default="moderate", index=True)

    duration = Column(Integer, nullable=False, default=30)         # minutes
    estimated_calories = Column(Integer, nullable=False, default=0)
    target_distance = Column(Float, nullable=True)                 # km

    includes_warmup = Column(Boolean, default=True)
    includes_cooldown = Column(Boolean, default=True)
    image = Column(String(255), default="default-walking.jpg")
    recommended_for = Column(JSONB, default=list)                  # e.g. ["beginners", "weight_loss"]

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
