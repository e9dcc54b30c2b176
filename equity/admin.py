from django.contrib import admin

from .models import (
    Company,
    CompanyAdministrator,
    CompanyInvestor,
    ConvertibleInvestment,
    ConvertibleSecurity,
    Dividend,
    DividendComputation,
    DividendComputationOutput,
    DividendRound,
    ShareClass,
    ShareHolding,
)


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ("name", "external_id", "equity_enabled", "created_at")
    list_filter = ("equity_enabled",)
    search_fields = ("name", "external_id")


@admin.register(CompanyAdministrator)
class CompanyAdministratorAdmin(admin.ModelAdmin):
    list_display = ("user", "company", "created_at")
    search_fields = ("user__username", "company__name")


@admin.register(CompanyInvestor)
class CompanyInvestorAdmin(admin.ModelAdmin):
    list_display = ("legal_name", "company", "external_id", "investment_amount_in_cents")
    search_fields = ("legal_name", "external_id")


@admin.register(ShareClass)
class ShareClassAdmin(admin.ModelAdmin):
    list_display = ("name", "company", "original_issue_price_in_dollars", "hurdle_rate", "preferred")
    list_filter = ("preferred",)


@admin.register(ShareHolding)
class ShareHoldingAdmin(admin.ModelAdmin):
    list_display = ("company_investor", "share_class", "number_of_shares", "issued_at")
    date_hierarchy = "issued_at"


class ConvertibleSecurityInline(admin.TabularInline):
    model = ConvertibleSecurity
    extra = 0


@admin.register(ConvertibleInvestment)
class ConvertibleInvestmentAdmin(admin.ModelAdmin):
    list_display = ("entity_name", "company", "amount_in_cents", "implied_shares", "issued_at")
    search_fields = ("entity_name",)
    inlines = [ConvertibleSecurityInline]


class DividendComputationOutputInline(admin.TabularInline):
    model = DividendComputationOutput
    extra = 0


@admin.register(DividendComputation)
class DividendComputationAdmin(admin.ModelAdmin):
    list_display = (
        "company",
        "total_amount_in_usd",
        "dividends_issuance_date",
        "return_of_capital",
        "finalized_at",
        "created_at",
    )
    list_filter = ("return_of_capital",)
    inlines = [DividendComputationOutputInline]


@admin.register(DividendRound)
class DividendRoundAdmin(admin.ModelAdmin):
    list_display = (
        "company",
        "issued_at",
        "number_of_shareholders",
        "number_of_shares",
        "total_amount_in_cents",
        "status",
        "return_of_capital",
    )
    list_filter = ("status", "return_of_capital")
    date_hierarchy = "issued_at"


@admin.register(Dividend)
class DividendAdmin(admin.ModelAdmin):
    list_display = (
        "company_investor",
        "dividend_round",
        "total_amount_in_cents",
        "qualified_amount_cents",
        "number_of_shares",
        "status",
    )
    list_filter = ("status",)
    search_fields = ("company_investor__legal_name",)
