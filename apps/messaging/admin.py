from django.contrib import admin

from .models import Conversation, Message


class MessageInline(admin.TabularInline):
    model = Message
    extra = 0
    can_delete = False
    fields = ("sender", "content", "message_type", "created_at", "read_at")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Conversation)
class ConversationAdmin(admin.ModelAdmin):
    list_display = ("id", "farmer", "laborer", "created_at", "updated_at")
    search_fields = ("farmer__username", "laborer__username", "farmer__profile__full_name", "laborer__profile__full_name")
    readonly_fields = ("farmer", "laborer", "created_at", "updated_at")
    inlines = [MessageInline]

    def has_delete_permission(self, request, obj=None):
        # conversations are never deleted
        return False


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ("id", "conversation", "sender", "message_type", "created_at", "read_at")
    list_filter = ("message_type",)
    search_fields = ("content", "sender__username")
    readonly_fields = ("conversation", "sender", "content", "message_type", "created_at", "read_at", "updated_at")

    def has_delete_permission(self, request, obj=None):
        return False
