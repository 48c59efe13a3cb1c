from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Shop owner account"""
    phone = models.CharField(max_length=20, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'


class AuditLog(models.Model):
    """Audit log for record changes"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('status_change', 'Order Status Changed'),
        ('measurement_edit', 'Measurements Edited'),
        ('measurement_reset', 'Measurements Reset'),
        ('image_upload', 'Image Uploaded'),
        ('image_remove', 'Image Removed'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Human-readable name of the object (e.g., customer name, order reference)")
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='audit_logs_created_3b1f0c_idx'),
            models.Index(fields=['action'], name='audit_logs_action_8c2d4e_idx'),
            models.Index(fields=['model_name'], name='audit_logs_model_n_5a7e91_idx'),
        ]
