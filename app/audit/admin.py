from django.contrib import admin

from audit.models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    """Read-only admin for the audit trail."""

    list_display = ("action", "log_type", "severity", "actor", "organization", "created_at")
    list_filter = ("log_type", "severity", "created_at")
    search_fields = ("action", "message")
    raw_id_fields = ("actor", "organization")
    readonly_fields = [f.name for f in AuditLog._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
