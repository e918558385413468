from __future__ import annotations
import json
import uuid
from fastapi import APIRouter, Depends, HTTPException, Request
from loguru import logger
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.core.permissions import Role
from app.models.user import User
from app.services.webhook_service import verify_identity_webhook

router = APIRouter(tags=["webhooks"])


def _profile(data: dict) -> dict:
    emails = data.get("email_addresses") or []
    email = emails[0].get("email_address") if emails else None
    profile = {
        "email": email.lower() if email else None,
        "first_name": data.get("first_name"),
        "last_name": data.get("last_name"),
        "username": data.get("username"),
        "profile_image_url": data.get("image_url"),
    }
    role = (data.get("public_metadata") or {}).get("role")
    if Role.parse(role) is not None:
        profile["role"] = role.strip().lower()
    return profile


@router.post("/webhooks/identity")
async def identity_webhook(request: Request, db: Session = Depends(get_db)):
    body = await request.body()
    headers = request.headers
    if not headers.get("svix-id") or not headers.get("svix-timestamp") or not headers.get("svix-signature"):
        raise HTTPException(status_code=400, detail="Missing webhook signature headers")
    if not verify_identity_webhook(headers, body):
        logger.warning(f"Rejected identity webhook {headers.get('svix-id')}")
        raise HTTPException(status_code=400, detail="Verification error")

    try:
        event = json.loads(body)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON payload")
    event_type = event.get("type")
    data = event.get("data") or {}
    external_id = data.get("id")
    logger.info(f"Received identity webhook {external_id} of type {event_type}")

    if event_type == "user.created":
        u = db.query(User).filter(User.external_id == external_id).first()
        if not u:
            u = User(id=str(uuid.uuid4()), external_id=external_id, role="member")
            db.add(u)
        for attr, value in _profile(data).items():
            setattr(u, attr, value)
        db.commit()
        return {"ok": True, "id": u.id, "event": event_type}

    if event_type == "user.updated":
        u = db.query(User).filter(User.external_id == external_id).first()
        if not u:
            raise HTTPException(status_code=404, detail="User not found")
        for attr, value in _profile(data).items():
            setattr(u, attr, value)
        db.commit()
        return {"ok": True, "id": u.id, "event": event_type}

    if event_type == "user.deleted":
        u = db.query(User).filter(User.external_id == external_id).first()
        if not u:
            raise HTTPException(status_code=404, detail="User not found")
        db.delete(u)
        db.commit()
        return {"ok": True, "message": "User deleted successfully"}

    return {"ok": True, "message": "Webhook received"}
