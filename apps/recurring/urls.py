from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'recurring'

router = DefaultRouter()
router.register(r'', views.RecurringExpenseViewSet, basename='recurring-expense')

urlpatterns = [
    # GET/POST          /api/recurring/
    # GET/PUT/PATCH     /api/recurring/{id}/
    # DELETE            /api/recurring/{id}/          - delete or deactivate
    # POST              /api/recurring/{id}/toggle/
    # GET               /api/recurring/{id}/transactions/

    # Cron entry point (Bearer CRON_SECRET)
    path('run/', views.run_recurring, name='run'),

    path('', include(router.urls)),
]
