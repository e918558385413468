from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from app.db.session import check_db_connection, get_db
from app.api.deps import get_optional_user_id
from app.core.errors import DomainError
from app.models.attendance import Attendance
from app.schemas.attendance import AttendanceIn
from app.services.attendance_service import list_attendance, submit_attendance
from app.services.pagination import pagination_meta

router = APIRouter(tags=["attendance"])


def attendance_dict(a: Attendance) -> dict:
    return {
        "id": a.id,
        "scheduleId": a.schedule_id,
        "firstName": a.first_name,
        "lastName": a.last_name,
        "email": a.email,
        "section": a.section,
        "yearLevel": a.year_level,
        "subject": a.subject,
        "date": a.date.isoformat(),
        "description": a.description,
        "systemUnit": a.system_unit,
        "keyboard": a.keyboard,
        "mouse": a.mouse,
        "internet": a.internet,
        "ups": a.ups,
        "createdAt": a.created_at.isoformat() if a.created_at else None,
        "updatedAt": a.updated_at.isoformat() if a.updated_at else None,
    }


def _db_unavailable() -> JSONResponse:
    return JSONResponse(status_code=503, content={"error": "Database connection error"})


@router.post("/attendance", status_code=201)
def record(body: AttendanceIn, db: Session = Depends(get_db),
           user_id: str | None = Depends(get_optional_user_id)):
    if not check_db_connection(db):
        return _db_unavailable()
    try:
        result = submit_attendance(db, body, user_id)
    except (DomainError, OperationalError):
        raise
    except Exception as e:
        logger.error(f"Error recording attendance: {e}")
        db.rollback()
        return JSONResponse(status_code=500, content={"error": "Failed to record attendance", "details": str(e)})

    logger.info(f"Attendance {result.attendance.id} escalation: {result.escalation.status}")
    return {
        "success": True,
        "message": "Attendance recorded successfully",
        "data": attendance_dict(result.attendance),
    }


@router.get("/attendance")
def list_records(page: int = 1, limit: int = 10, startDate: str | None = None, endDate: str | None = None,
                 scheduleId: str | None = None, db: Session = Depends(get_db)):
    if not check_db_connection(db):
        return _db_unavailable()
    rows, total = list_attendance(db, page=page, limit=limit, start_date=startDate,
                                  end_date=endDate, schedule_id=scheduleId)
    data = []
    for a, s, r, u in rows:
        d = attendance_dict(a)
        d["schedule"] = {
            "title": s.title,
            "room": {"id": r.id, "number": r.number, "name": r.name},
            "user": {"id": u.id, "firstName": u.first_name, "lastName": u.last_name} if u else None,
        }
        data.append(d)
    return {"success": True, "data": data, "pagination": pagination_meta(total, page, limit)}
