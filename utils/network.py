import ipaddress

from flask import request


def client_ip() -> str:
    """
    Socket address of the caller. X-Forwarded-For is only honoured through
    ProxyFix (see TRUSTED_PROXY_COUNT), which rewrites remote_addr.
    """
    addr = (request.remote_addr or "").strip()
    try:
        return str(ipaddress.ip_address(addr))
    except ValueError:
        return "unknown"
