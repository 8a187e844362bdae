# app/models/user_profile.py
from sqlalchemy import Column, Integer, Float, String, DateTime, ForeignKey, event
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship, attributes
from datetime import datetime
import logging
from app.database import Base
from app.utils.walking_calc import calculate_bmi, classify_bmi

logger = logging.getLogger(__name__)

class UserProfile(Base):
    __tablename__ = "user_profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete="CASCADE"), unique=True, nullable=False)

    # Intake answers
    display_name = Column(String(100), nullable=True)
    gender = Column(String(20), nullable=True)            # "male", "female", "non-binary"
    fitness_goals = Column(JSONB, default=list)           # e.g. ["lose_weight", "get_outdoors"]
    focus_areas = Column(JSONB, default=list)             # e.g. ["stress_reduction", "endurance"]
    body_parts_to_tone_up = Column(JSONB, default=list)   # e.g. ["belly", "thighs"]
    fitness_level = Column(String(20), nullable=True)     # "beginner", "intermediate", "advanced"
    daily_walking_time = Column(String(30), nullable=True)  # "less_than_20_mins", "20_60_mins", ...
    activity_level = Column(String(30), nullable=True)    # "inactive", "somewhat_active", "active", "very_active"
    step_goal = Column(Integer, default=10000)

    # Body measurements (kg / cm)
    age = Column(Integer, nullable=True)
    current_weight = Column(Float, nullable=True)
    target_weight = Column(Float, nullable=True)
    height = Column(Float, nullable=True)

    # Calculated Columns (Stored in DB)
    bmi = Column(Float, nullable=True)
    bmi_category = Column(String(20), nullable=True)

    timezone = Column(String(50), default="UTC")  # e.g. "Asia/Kolkata"
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_physical_update = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="profile")


def apply_body_metrics(target):
    """
    Recomputes BMI and its category from the stored weight and height.
    Leaves both untouched when either measurement is missing.
    """
    if not all([target.current_weight, target.height]):
        return

    bmi = calculate_bmi(target.current_weight, target.height)
    if target.bmi is None or abs(target.bmi - bmi) > 0.05:
        target.bmi = bmi
    target.bmi_category = classify_bmi(bmi)


# --- AUTOMATION LISTENERS ---

@event.listens_for(UserProfile, 'before_insert')
def receive_before_insert(mapper, connection, target):
    apply_body_metrics(target)

@event.listens_for(UserProfile, 'before_update')
def receive_before_update(mapper, connection, target):
    physical_fields = ['current_weight', 'height', 'target_weight', 'fitness_level', 'fitness_goals', 'step_goal']
    if any(attributes.get_history(target, field).has_changes() for field in physical_fields):
        logger.info(f"Physical stats changed for profile {getattr(target, 'id', 'unknown')}")
        target.last_physical_update = datetime.utcnow()

    apply_body_metrics(target)
