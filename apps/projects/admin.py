from django.contrib import admin
from .models import Project


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = [
        'sequence',
        'abbreviation',
        'name',
        'contractor',
        'host_team',
        'coordinator_name',
        'coordinator_email',
    ]
    list_filter = ['host_team']
    search_fields = ['name', 'abbreviation', 'contractor', 'coordinator_name']
    ordering = ['sequence']
    readonly_fields = ['created_at', 'updated_at']
