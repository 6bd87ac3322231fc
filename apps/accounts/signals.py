from django.contrib.auth.signals import user_logged_in, user_login_failed
from django.db.models.signals import pre_save
from django.dispatch import receiver

from apps.audit.utils import log_event

from .models import Profile


@receiver(user_logged_in)
def audit_login(sender, request, user, **kwargs):
    #  record successful interactive logins.
    log_event(request, "auth.login", "User", user.id)


@receiver(user_login_failed)
def audit_login_failed(sender, credentials, request=None, **kwargs):
    #  record failed logins without attaching a user id.
    username = (credentials or {}).get("username", "")
    log_event(request, "auth.login_failed", "Auth", username)


@receiver(pre_save, sender=Profile)
def audit_role_change(sender, instance, **kwargs):
    # A role switch moves the user to the other conversation slot for new chats.
    if not instance.pk:
        return
    previous = sender.objects.filter(pk=instance.pk).values_list("role", flat=True).first()
    if previous is not None and previous != instance.role:
        log_event(None, "profile.role_change", "Profile", instance.user_id, actor=instance.user)
