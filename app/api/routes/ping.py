import time
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.db.session import check_db_connection, get_db

router = APIRouter(tags=["health"])


@router.get("/ping")
def ping(db: Session = Depends(get_db)):
    started = time.monotonic()
    connected = check_db_connection(db)
    version = None
    if connected:
        dialect = db.get_bind().dialect
        info = getattr(dialect, "server_version_info", None)
        version = f"{dialect.name} {'.'.join(str(p) for p in info)}" if info else dialect.name
    status = {
        "connected": connected,
        "queryTime": round((time.monotonic() - started) * 1000),
        "version": version,
    }
    return JSONResponse(
        status_code=200 if connected else 503,
        content={
            "success": connected,
            "message": "Database connection is working" if connected else "Database connection failed",
            "dbStatus": status,
        },
    )
