from django.urls import path

from . import views

urlpatterns = [
    path("dividend_computations/", views.dividend_computations, name="dividend_computations"),
    path(
        "dividend_computations/<int:computation_id>/",
        views.dividend_computation_detail,
        name="dividend_computation_detail",
    ),
    path(
        "dividend_computations/<int:computation_id>/<str:variant>.csv",
        views.dividend_computation_export,
        name="dividend_computation_export",
    ),
    path(
        "dividend_computations/<str:computation_external_id>/dividend_rounds/",
        views.dividend_rounds,
        name="dividend_rounds",
    ),
]
