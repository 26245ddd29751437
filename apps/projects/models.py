from django.db import models
import uuid


class HostTeam(models.TextChoices):
    CIVIL = '土木工作隊', '土木工作隊'
    MECHANICAL = '機械工作隊', '機械工作隊'
    ARCHITECTURE = '建築工作隊', '建築工作隊'
    ELECTRICAL = '電氣工作隊', '電氣工作隊'
    CENTRAL = '中部工作隊', '中部工作隊'
    SOUTHERN = '南部工作隊', '南部工作隊'
    SAFETY = '工業安全衛生組', '工業安全衛生組'
    DIRECTOR_OFFICE = '處長室', '處長室'
    ENGINEERING = '工務組', '工務組'
    INSPECTION = '檢驗組', '檢驗組'
    PLANNING = '規劃組', '規劃組'


class Project(models.Model):
    """Construction project with its contractor and coordinating staff."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sequence = models.PositiveIntegerField(default=0)
    abbreviation = models.CharField(max_length=50, blank=True)
    name = models.CharField(max_length=200, unique=True)
    contract_number = models.CharField(max_length=100, blank=True)
    contractor = models.CharField(max_length=200)

    # Coordinator receives the lecture reminders
    coordinator_name = models.CharField(max_length=100)
    coordinator_email = models.EmailField(blank=True)
    host_team = models.CharField(max_length=50, blank=True)

    # Department manager
    manager_name = models.CharField(max_length=100, blank=True)
    manager_email = models.EmailField(blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'projects'
        indexes = [
            models.Index(fields=['host_team'], name='projects_host_team_idx'),
            models.Index(fields=['sequence'], name='projects_sequence_idx'),
        ]
        ordering = ['sequence', 'name']

    def __str__(self):
        return self.abbreviation or self.name

    @property
    def display_name(self):
        """Abbreviation when set; used for chart labels and file names."""
        return self.abbreviation or self.name
