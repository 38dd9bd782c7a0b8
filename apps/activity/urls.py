from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'activity'

router = DefaultRouter()
router.register(r'', views.ActivityLogViewSet, basename='activity')

urlpatterns = [
    # GET /api/activity/?action=&entity_type=&user=&date_from=&date_to=&search=
    # GET /api/activity/{id}/
    path('', include(router.urls)),
]
