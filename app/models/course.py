from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Enum, Numeric, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base
from app.core.constants import CourseLanguageEnum, CourseLevelEnum, enum_values

class Course(Base):
    __tablename__ = "courses"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_courses_price_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), index=True, nullable=False)
    description = Column(String(1000), nullable=False, default="")
    language = Column(Enum(CourseLanguageEnum, values_callable=enum_values), nullable=False)
    level = Column(Enum(CourseLevelEnum, values_callable=enum_values), nullable=False, default=CourseLevelEnum.BEGINNER)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    thumbnail_url = Column(String, nullable=True)
    is_published = Column(Boolean, nullable=False, default=False)
    instructor_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    instructor = relationship("User", back_populates="created_courses")
    lessons = relationship(
        "Lesson",
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="Lesson.order_index",
    )
