"""Repository layer: company-scoped queries and helpers."""

from apps.subscription_api.repositories.company_filters import (
    company_where,
    select_bots_for_company,
    select_files_for_company,
    select_users_for_company,
)

__all__ = [
    "company_where",
    "select_bots_for_company",
    "select_files_for_company",
    "select_users_for_company",
]
