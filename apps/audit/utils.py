from apps.audit.models import AuditEvent


def _client_ip(request) -> str | None:
    if request is None:
        return None
    xff = request.META.get("HTTP_X_FORWARDED_FOR")
    if xff:
        return xff.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR")


def _request_actor(request):
    user = getattr(request, "user", None)
    return user if user is not None and user.is_authenticated else None


def log_event(request, action: str, object_type: str = "", object_id: str | int | None = None, *, actor=None):
    """
    Record one audit row. ``request`` may be None for events raised outside a
    request (signals, management commands); pass ``actor`` explicitly then.
    """
    AuditEvent.objects.create(
        actor=actor if actor is not None else _request_actor(request),
        action=action,
        object_type=object_type,
        object_id=str(object_id or ""),
        ip=_client_ip(request),
        user_agent=request.META.get("HTTP_USER_AGENT", "") if request is not None else "",
    )
