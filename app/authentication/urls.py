"""
URL configuration for authentication app.

URL structure:
    /api/v1/auth/token/          - Obtain access/refresh JWT pair (simplejwt)
    /api/v1/auth/token/refresh/  - Refresh an access token (simplejwt)
    /api/v1/auth/user/           - Current user (GET, PUT, PATCH)
    /api/v1/auth/users/          - User directory (search)
"""

from django.urls import path
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from authentication.views import CurrentUserView, UserDirectoryView

app_name = "authentication"

urlpatterns = [
    path("token/", TokenObtainPairView.as_view(), name="token-obtain"),
    path("token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),
    path("user/", CurrentUserView.as_view(), name="current-user"),
    path("users/", UserDirectoryView.as_view(), name="user-directory"),
]
