"""
Router feedback et formulaire de contact
"""

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from taskmaster.core.database import get_db
from taskmaster.models.contact import ContactMessage
from taskmaster.models.feedback import Feedback
from taskmaster.schemas.feedback import FeedbackCreate, FeedbackResponse, ContactCreate, ContactResponse
from taskmaster.services.email_service import get_notifier, send_contact_notification

router = APIRouter(tags=["feedback"])


@router.post("/feedback", response_model=FeedbackResponse, status_code=status.HTTP_201_CREATED)
def submit_feedback(feedback_data: FeedbackCreate, db: Session = Depends(get_db)):
    feedback = Feedback(**feedback_data.model_dump())
    db.add(feedback)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to save feedback")
    db.refresh(feedback)
    return feedback


@router.post("/contact", response_model=ContactResponse, status_code=status.HTTP_201_CREATED)
def submit_contact(
    contact_data: ContactCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    notifier=Depends(get_notifier)
):
    """
    Enregistre le message puis notifie l'admin par email.

    L'email part en tâche de fond APRÈS la réponse 201: un échec d'envoi
    n'est jamais renvoyé au client (juste loggé).
    """
    contact = ContactMessage(**contact_data.model_dump())
    db.add(contact)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to save message")
    db.refresh(contact)

    background_tasks.add_task(
        send_contact_notification,
        notifier,
        contact.user_email,
        contact.subject,
        contact.message,
    )
    return contact
