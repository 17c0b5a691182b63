import json
from flask import request
from models import db
from models.audit_log import AuditLog
from security.bruteforce import storage_errors
from utils.network import client_ip

@storage_errors
def log_event(action: str, email=None, metadata=None):
    user_agent = request.headers.get("User-Agent", "")

    row = AuditLog(
        action=action,
        email=email or None,
        ip=client_ip(),
        user_agent=user_agent[:255] if user_agent else None,
        metadata_json=json.dumps(metadata) if metadata else None
    )
    db.session.add(row)
    db.session.commit()
