from __future__ import annotations

from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models.signals import post_save
from django.dispatch import receiver

from .skills import parse_skills


class User(AbstractUser):
    """
    Project user model.
    - display_name: lightweight label you can show in UI
    """
    display_name = models.CharField(max_length=150, blank=True, default="")

    def __str__(self) -> str:  # type: ignore[override]
        return self.display_name or self.get_full_name() or self.username


class Profile(models.Model):
    """
    Marketplace profile. The role decides which conversation slot the user
    occupies; an empty role means the user hasn't finished onboarding.
    """
    ROLE_FARMER = "farmer"
    ROLE_LABORER = "laborer"
    ROLE_CHOICES = [
        (ROLE_FARMER, "Farmer"),
        (ROLE_LABORER, "Laborer"),
    ]

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
    )
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, blank=True, default="")
    full_name = models.CharField(max_length=100, blank=True, default="")
    location = models.CharField(max_length=200, blank=True, default="")
    phone = models.CharField(max_length=50, blank=True, default="")
    skills = models.JSONField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [models.Index(fields=["role"], name="accounts_pr_role_4c1f0e_idx")]

    def __str__(self) -> str:
        return f"{self.full_name or self.user} ({self.role or 'no role'})"

    @property
    def display_name(self) -> str:
        return self.full_name or str(self.user)

    def clean(self):
        super().clean()
        if self.skills is None:
            return
        if not self.role:
            raise ValidationError({"skills": "Pick a role before adding skills."})
        try:
            parse_skills(self.role, self.skills)
        except ValueError as e:
            raise ValidationError({"skills": str(e)}) from e

    def parsed_skills(self):
        """The role-tagged skills record, or None when nothing is stored."""
        if self.skills is None or not self.role:
            return None
        return parse_skills(self.role, self.skills)


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def create_profile(sender, instance, created, **kwargs):
    # Every account gets an empty profile; the role is picked during onboarding.
    if created:
        Profile.objects.get_or_create(user=instance)
