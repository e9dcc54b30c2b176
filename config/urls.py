"""Root URL routing for the project."""
from django.contrib import admin
from django.contrib.auth import views as auth_views
from django.urls import include, path

from equity.views import AdministratorLoginView

urlpatterns = [
    path("login/", AdministratorLoginView.as_view(), name="login"),
    path("logout/", auth_views.LogoutView.as_view(), name="logout"),
    path("companies/<str:company_id>/", include("equity.urls")),
    path("admin/", admin.site.urls),
]
