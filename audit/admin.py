from django.contrib import admin
from .models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    """Audit log monitoring"""
    list_display = ('action', 'entity_type', 'entity_name', 'actor_email', 'created_at')
    list_filter = ('action', 'entity_type', 'created_at')
    search_fields = ('actor_email', 'entity_name', 'description')
    ordering = ('-created_at',)
    readonly_fields = ('actor', 'actor_email', 'action', 'entity_type', 'entity_id',
                       'entity_name', 'description', 'changes', 'created_at')

    def has_add_permission(self, request):
        """Prevent manual addition of audit logs"""
        return False

    def has_change_permission(self, request, obj=None):
        """Audit logs are read-only"""
        return False
