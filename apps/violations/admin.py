from django.contrib import admin
from django.utils.html import format_html
from .models import Violation, ViolationStatus


STATUS_COLORS = {
    ViolationStatus.PENDING: ('#FEF3C7', '#92400E'),
    ViolationStatus.NOTIFIED: ('#DBEAFE', '#1E40AF'),
    ViolationStatus.SUBMITTED: ('#EDE9FE', '#5B21B6'),
    ViolationStatus.COMPLETED: ('#DCFCE7', '#166534'),
}


@admin.register(Violation)
class ViolationAdmin(admin.ModelAdmin):
    """Admin interface for violations and their lecture deadlines."""

    list_display = [
        'contractor_name',
        'project_name',
        'violation_date',
        'lecture_deadline',
        'status_badge',
        'notify_status',
        'email_count',
        'fine_amount',
    ]
    list_filter = ['status', 'notify_status', 'is_major_violation', 'violation_date']
    search_fields = ['contractor_name', 'project_name', 'description']
    date_hierarchy = 'violation_date'
    readonly_fields = ['scan_file_history', 'created_at', 'updated_at']

    def status_badge(self, obj):
        """Display status as colored badge."""
        bg, fg = STATUS_COLORS.get(obj.status, ('#ccc', '#666'))
        return format_html(
            '<span style="background: {}; color: {}; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            bg, fg, obj.get_status_display()
        )
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'
