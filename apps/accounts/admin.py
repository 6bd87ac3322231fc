# apps/accounts/admin.py
from __future__ import annotations

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin
from django.utils.translation import gettext_lazy as _

from .models import Profile, User


class ProfileInline(admin.StackedInline):
    model = Profile
    can_delete = False
    extra = 0
    fk_name = "user"
    fieldsets = (
        (None, {
            "fields": ("role", "full_name", "location", "phone", "skills"),
        }),
    )


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    """
    Custom admin for AUTH_USER_MODEL:
    - Keep Django auth features
    - Add display_name
    - Include the marketplace Profile inline so roles can be fixed by staff
    """
    list_display = ("id", "username", "email", "display_name", "role", "is_staff", "is_active")
    search_fields = ("username", "email", "first_name", "last_name", "display_name", "profile__full_name")
    list_filter = ("profile__role", "is_staff", "is_active")
    ordering = ("id",)

    fieldsets = (
        (None, {"fields": ("username", "password")}),
        (_("Personal info"), {"fields": ("first_name", "last_name", "email", "display_name")}),
        (_("Permissions"), {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")}),
        (_("Important dates"), {"fields": ("last_login", "date_joined")}),
    )

    add_fieldsets = (
        (None, {
            "classes": ("wide",),
            "fields": ("username", "password1", "password2", "email", "display_name"),
        }),
    )

    inlines = [ProfileInline]

    @admin.display(description="Role")
    def role(self, obj: User):
        profile = getattr(obj, "profile", None)
        return profile.get_role_display() if profile and profile.role else "-"


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "full_name", "role", "location", "updated_at")
    list_filter = ("role",)
    search_fields = ("user__username", "full_name", "location", "phone")
