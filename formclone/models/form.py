from sqlalchemy import Column, Integer, String, Text, ForeignKey, DateTime, Enum
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
import enum
from formclone.db.base import Base

class QuestionType(str, enum.Enum):
    TEXT = "text"
    TEXTAREA = "textarea"
    RADIO = "radio"
    CHECKBOX = "checkbox"

# Question types whose answers come from a fixed list of options
CHOICE_TYPES = (QuestionType.RADIO, QuestionType.CHECKBOX)

class Form(Base):
    __tablename__ = "forms"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    owner = relationship("User", back_populates="forms")
    questions = relationship(
        "Question",
        back_populates="form",
        order_by="Question.question_order",
        passive_deletes=True,
    )
    submissions = relationship("FormSubmission", back_populates="form", passive_deletes=True)

class Question(Base):
    __tablename__ = "questions"
    # Replaced rows must never hand their ids to new ones
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True)
    form_id = Column(Integer, ForeignKey("forms.id", ondelete="CASCADE"), nullable=False, index=True)
    question_text = Column(Text, nullable=False)
    question_type = Column(
        Enum(QuestionType, name="question_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    question_order = Column(Integer, nullable=False, default=0)

    form = relationship("Form", back_populates="questions")
    options = relationship(
        "Option",
        back_populates="question",
        order_by="Option.option_order",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

class Option(Base):
    __tablename__ = "options"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True)
    question_id = Column(Integer, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True)
    option_text = Column(Text, nullable=False)
    option_order = Column(Integer, nullable=False, default=0)

    question = relationship("Question", back_populates="options")
