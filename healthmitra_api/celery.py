# healthmitra_api/celery.py
import os
from celery import Celery


# Configure Django for Celery
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'healthmitra_api.settings')

app = Celery('healthmitra_api')

# Configuration from settings.py with the CELERY_ prefix
app.config_from_object('django.conf:settings', namespace='CELERY')

# Task discovery across all Django apps
app.autodiscover_tasks()
