from sqlalchemy import Column, Integer, ForeignKey, DateTime, Text
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from formclone.db.base import Base

class FormSubmission(Base):
    __tablename__ = "form_submissions"

    id = Column(Integer, primary_key=True)
    form_id = Column(Integer, ForeignKey("forms.id", ondelete="CASCADE"), nullable=False, index=True)
    submitted_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    form = relationship("Form", back_populates="submissions")
    answers = relationship(
        "SubmissionAnswer",
        back_populates="submission",
        order_by="SubmissionAnswer.id",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

class SubmissionAnswer(Base):
    __tablename__ = "submission_answers"

    id = Column(Integer, primary_key=True)
    submission_id = Column(Integer, ForeignKey("form_submissions.id", ondelete="CASCADE"), nullable=False, index=True)
    # Replacing a form's questions detaches its answers instead of deleting them
    question_id = Column(Integer, ForeignKey("questions.id", ondelete="SET NULL"), nullable=True, index=True)
    question_text = Column(Text, nullable=True)
    answer = Column(Text, nullable=False)

    submission = relationship("FormSubmission", back_populates="answers")
    question = relationship("Question")
