from django.contrib.auth.models import AbstractUser
from django.db import models


class Role(models.TextChoices):
    """Closed set of application roles"""
    ADMIN = 'admin', 'Admin'
    CUSTOMER = 'customer', 'Customer'


class User(AbstractUser):
    """Extended user model with display name and role"""
    name = models.CharField(max_length=255, blank=True)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.CUSTOMER, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name or self.username

    class Meta:
        db_table = 'users'


class AuditLog(models.Model):
    """Audit log for catalog changes and seeding"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('seed', 'Seed'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Human-readable name of the object (e.g., product name)")
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.action} {self.model_name}#{self.object_id}"

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='audit_logs_created_4c4d1b_idx'),
            models.Index(fields=['action'], name='audit_logs_action_0f3a51_idx'),
            models.Index(fields=['model_name'], name='audit_logs_model_n_9e2c7a_idx'),
        ]
