from django.urls import path
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from . import views

app_name = 'users'

urlpatterns = [
    # Authentication (JWT)
    path('token/', TokenObtainPairView.as_view(), name='token-obtain'),
    path('token/refresh/', TokenRefreshView.as_view(), name='token-refresh'),

    # Current user
    path('user/', views.get_current_user, name='current-user'),

    # Role permissions (defaults plus stored overrides)
    path('roles/', views.role_list, name='role-list'),
    path('roles/<str:role>/permissions/', views.role_permissions, name='role-permissions'),
]
