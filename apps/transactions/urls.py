from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import TransactionViewSet, PaymentViewSet

app_name = 'transactions'

router = DefaultRouter()
router.register(r'payments', PaymentViewSet, basename='payment')
router.register(r'', TransactionViewSet, basename='transaction')

urlpatterns = [
    path('', include(router.urls)),
]
