from fastapi import Header


def get_request_user(x_user_id: str = Header(default="system")) -> str:
    """Identity recorded in created_by/updated_by and the audit log.

    Authentication is handled upstream; the gateway forwards the caller in
    the X-User-ID header.
    """
    return x_user_id.strip() or "system"
