"""
Analysis router: heuristic reading statistics over the caller's collection.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from auth import get_current_user_id
from database import get_db
from services import analysis_service, book_service

router = APIRouter(prefix="/analysis")


@router.get("/reading-analysis")
def reading_analysis(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    books = book_service.list_books(db, user_id)
    return analysis_service.analyze_reading_patterns(books)


@router.get("/detailed-insights")
def detailed_insights(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Basic analysis plus totals, monthly/yearly progress and goal suggestions."""
    books = book_service.list_books(db, user_id)
    return analysis_service.detailed_insights(books)
