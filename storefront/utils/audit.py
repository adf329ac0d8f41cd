from fastapi import Request
from sqlalchemy.orm import Session
from storefront.models.log import Log

def client_ip(request: Request):
    return request.client.host if request.client else None

def write_log(db: Session, *, user_id, action, resource, status="SUCCESS", ip=None, meta=None):
    entry = Log(user_id=user_id, action=action, resource=resource, status=status, ip=ip, meta=meta or {})
    db.add(entry)
    db.commit()
