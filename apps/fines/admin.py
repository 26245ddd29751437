from django.contrib import admin
from django.utils.html import format_html
from .models import Fine, Section


@admin.register(Section)
class SectionAdmin(admin.ModelAdmin):
    list_display = ['name', 'host_team', 'title', 'email']
    list_filter = ['host_team', 'title']
    search_fields = ['name', 'email']


@admin.register(Fine)
class FineAdmin(admin.ModelAdmin):
    """Admin interface for fine line items."""

    list_display = [
        'ticket_number',
        'issue_date',
        'contractor',
        'violation_item',
        'unit_price',
        'quantity',
        'subtotal',
        'violator_name',
        'converted_badge',
    ]
    list_filter = ['host_team', 'issue_date']
    search_fields = ['ticket_number', 'contractor', 'violation_item', 'violator_name']
    date_hierarchy = 'issue_date'
    readonly_fields = ['subtotal', 'created_at', 'updated_at']

    def converted_badge(self, obj):
        """Show whether the ticket was converted into a violation."""
        if obj.violation_id:
            return format_html(
                '<span style="background: {}; color: {}; padding: 3px 8px; '
                'border-radius: 10px; font-size: 11px;">{}</span>',
                '#DCFCE7', '#166534', '已轉違規'
            )
        return '-'
    converted_badge.short_description = 'Converted'
