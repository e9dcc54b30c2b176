from __future__ import annotations

import json
import logging
from functools import wraps

from django.contrib.auth.decorators import login_required
from django.contrib.auth.views import LoginView
from django.http import HttpResponse, JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_http_methods, require_POST

from allocation.calc import AllocationError

from .forms import AdministratorAuthenticationForm, DividendComputationForm
from .models import Company, DividendComputation
from .services.create_dividend_round import CreateDividendRound
from .services.dividend_computation_generation import DividendComputationGeneration

logger = logging.getLogger(__name__)

CSV_EXPORTS = {
    "per_investor_and_share_class": DividendComputation.to_csv,
    "per_investor": DividendComputation.to_per_investor_csv,
    "final": DividendComputation.to_final_csv,
}


# -------------------------------
# Helpers
# -------------------------------


class AdministratorLoginView(LoginView):
    template_name = "registration/login.html"
    authentication_form = AdministratorAuthenticationForm
    redirect_authenticated_user = True


def company_administrator_required(view_func):
    """Resolves the company from the URL and hands it to the view; admins only."""

    @wraps(view_func)
    @login_required
    def _wrapped(request, company_id, *args, **kwargs):
        company = get_object_or_404(Company, external_id=company_id)
        if not company.administrators.filter(user=request.user).exists():
            return JsonResponse({"error": "Only company administrators can do this."}, status=403)
        return view_func(request, company, *args, **kwargs)

    return _wrapped


def _request_payload(request) -> dict:
    if request.content_type == "application/json":
        data = json.loads(request.body or b"{}")
    else:
        data = request.POST.dict()
    if isinstance(data, dict) and "dividend_computation" in data:
        data = data["dividend_computation"]
    if not isinstance(data, dict):
        raise ValueError("Request body must be a JSON object.")
    return data


def _index_props(computation: DividendComputation) -> dict:
    return {
        "id": computation.id,
        "total_amount_in_usd": computation.total_amount_in_usd,
        "dividends_issuance_date": computation.dividends_issuance_date,
        "return_of_capital": computation.return_of_capital,
        "number_of_shareholders": computation.number_of_shareholders(),
    }


def _props(computation: DividendComputation) -> dict:
    props = _index_props(computation)
    props["computation_outputs"] = computation.broken_down_by_investor()
    return props


# -------------------------------
# Dividend computations
# -------------------------------


@require_http_methods(["GET", "POST"])
@company_administrator_required
def dividend_computations(request, company: Company):
    if request.method == "POST":
        try:
            payload = _request_payload(request)
        except ValueError:
            return JsonResponse({"error": "Request body must be a JSON object."}, status=400)
        form = DividendComputationForm(payload)
        if not form.is_valid():
            return JsonResponse({"errors": form.errors}, status=422)
        computation = DividendComputationGeneration(
            company,
            dividends_issuance_date=form.cleaned_data["dividends_issuance_date"],
            amount_in_usd=form.cleaned_data["amount_in_usd"],
            return_of_capital=form.cleaned_data["return_of_capital"],
        ).process()
        return JsonResponse({"id": computation.id}, status=201)

    computations = company.dividend_computations.all()
    try:
        data = [_index_props(c) for c in computations]
    except AllocationError as exc:
        return JsonResponse({"error": str(exc)}, status=422)
    return JsonResponse(data, safe=False)


@require_http_methods(["GET"])
@company_administrator_required
def dividend_computation_detail(request, company: Company, computation_id: int):
    computation = get_object_or_404(company.dividend_computations, id=computation_id)
    try:
        data = _props(computation)
    except AllocationError as exc:
        return JsonResponse({"error": str(exc)}, status=422)
    return JsonResponse(data)


@require_http_methods(["GET"])
@company_administrator_required
def dividend_computation_export(request, company: Company, computation_id: int, variant: str):
    computation = get_object_or_404(company.dividend_computations, id=computation_id)
    export = CSV_EXPORTS.get(variant)
    if export is None:
        return JsonResponse({"error": f"Unknown export {variant!r}."}, status=404)
    try:
        content = export(computation)
    except AllocationError as exc:
        return JsonResponse({"error": str(exc)}, status=422)
    response = HttpResponse(content, content_type="text/csv")
    response["Content-Disposition"] = f'attachment; filename="{variant}.csv"'
    return response


# -------------------------------
# Dividend rounds
# -------------------------------


@require_POST
@company_administrator_required
def dividend_rounds(request, company: Company, computation_external_id: str):
    computation = get_object_or_404(company.dividend_computations, external_id=computation_external_id)
    result = CreateDividendRound(computation).process()
    if result["success"]:
        return JsonResponse({"id": result["dividend_round"].external_id}, status=201)
    logger.warning("Dividend round not created for computation %s: %s", computation.id, result["error"])
    return JsonResponse({"error": result["error"]}, status=422)
