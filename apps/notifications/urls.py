from django.urls import path
from . import views

app_name = 'notifications'

urlpatterns = [
    # POST    /api/email/send/
    path('email/send/', views.send_email_view, name='send-email'),

    # GET/PUT /api/notifications/settings/
    path('notifications/settings/', views.notification_settings, name='settings'),
]
